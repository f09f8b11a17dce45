# examples/pendulum.py
import numpy as np

from spring_sim import Force, Physics, System
from spring_sim.core import kinetic_energy, spring_energy

system = System()
system.state.enable(Force.GRAVITY, 10.0, 0.0)
system.state.adaptive_step = True

# A chain of five masses hanging from a nail, pulled out sideways
anchor = system.add_mass(320.0, 440.0, fixed=True)
prev = anchor
for k in range(1, 6):
    m = system.add_mass(320.0 + 30.0 * k, 440.0, mass=1.0)
    system.add_spring(prev, m, ks=200.0, kd=1.0, restlen=30.0)
    prev = m

physics = Physics(system, width=640, height=480)
redraws = 0
for _ in range(400):
    if physics.advance():
        redraws += 1

tip = system.get_mass(prev)
print("t:", physics.time, "redraws:", redraws, "dt:", system.state.dt)
print("tip position:", tip.position,
      "distance:", float(np.linalg.norm(tip.position - system.get_mass(anchor).position)))
print("energy:", kinetic_energy(system) + spring_energy(system))
