import math

# namespace the generated map functions are executed in
NS = {
    "sin": math.sin,
    "cos": math.cos,
    "atan": math.atan,
}
