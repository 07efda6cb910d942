# Run: python main.py sketch/bouncing_ball.py
# `p` is provided by the sketch harness.
ball = {"x": 100.0, "y": 100.0, "vx": 180.0, "vy": 140.0, "r": 24.0}


@p.setup
def setup():
    p.background(16, 16, 24)


@p.draw
def draw():
    dt = p.delta_time / 1000.0
    ball["x"] += ball["vx"] * dt
    ball["y"] += ball["vy"] * dt
    if ball["x"] < ball["r"] or ball["x"] > p.width - ball["r"]:
        ball["vx"] *= -1
    if ball["y"] < ball["r"] or ball["y"] > p.height - ball["r"]:
        ball["vy"] *= -1
    ball["x"] = p.constrain(ball["x"], ball["r"], p.width - ball["r"])
    ball["y"] = p.constrain(ball["y"], ball["r"], p.height - ball["r"])

    p.background(16, 16, 24)
    p.no_stroke()
    p.fill(255, 120, 60)
    p.circle(ball["x"], ball["y"], ball["r"] * 2)
    p.fill(220)
    p.text(f"frame {p.frame_count}", 10, 20)


@p.key_pressed
def key_pressed():
    if p.key == p.SPACE:
        ball["vx"], ball["vy"] = p.random(-300, 300), p.random(-300, 300)
