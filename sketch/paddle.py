# Run: python main.py sketch/paddle.py
# Move the paddle with the mouse or the arrow keys.
state = {"x": 0.0, "speed": 420.0}


@p.setup
def setup():
    state["x"] = p.width / 2


@p.draw
def draw():
    dt = p.delta_time / 1000.0
    if p.key_is_down(p.LEFT_ARROW):
        state["x"] -= state["speed"] * dt
    if p.key_is_down(p.RIGHT_ARROW):
        state["x"] += state["speed"] * dt
    state["x"] = p.constrain(state["x"], 50, p.width - 50)

    p.background("#202830")
    p.stroke(90, 110, 130)
    p.stroke_weight(2)
    for i in range(0, p.width, 40):
        p.line(i, 0, i, p.height)
    p.no_stroke()
    p.fill(240, 240, 240)
    p.rect(state["x"] - 50, p.height - 30, 100, 12)


@p.mouse_moved
def mouse_moved():
    state["x"] = p.mouse_x
