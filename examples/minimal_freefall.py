# examples/minimal_freefall.py
from spring_sim import Force, Physics, System

system = System()
system.state.enable(Force.GRAVITY, 10.0, 0.0)

ball = system.add_mass(320.0, 400.0, mass=1.0, elastic=0.8)

physics = Physics(system, width=640, height=480)
physics.run(10.0)

m = system.get_mass(ball)
print("t:", physics.time)
print("pos:", m.position)
print("vel:", m.velocity)
