# examples/jelly.py
"""
Drop a spring-braced square on the floor, save it as .xsp and load it back.
Run:
  python examples/jelly.py out.xsp
"""
import logging
import sys

from spring_sim import Force, Physics, System, setup_logging
from spring_sim.io import load_xsp, save_xsp

setup_logging(logging.INFO)

system = System()
st = system.state
st.enable(Force.GRAVITY, 10.0, 0.0)
st.stickiness = 2.0
st.collide = True

corners = [
    system.add_mass(x, y, mass=1.0, elastic=0.6)
    for x, y in ((280.0, 300.0), (360.0, 300.0), (360.0, 380.0), (280.0, 380.0))
]
for i in range(4):
    system.add_spring(corners[i], corners[(i + 1) % 4], ks=50.0, kd=0.5)
system.add_spring(corners[0], corners[2], ks=50.0, kd=0.5)
system.add_spring(corners[1], corners[3], ks=50.0, kd=0.5)

physics = Physics(system)
physics.run(5.0)
print("corner heights:", [round(float(system.get_mass(c).position[1]), 2) for c in corners])

path = save_xsp(system, sys.argv[1] if len(sys.argv) > 1 else "jelly.xsp")

restored = System()
load_xsp(path, restored)
print("restored masses:", len(list(restored.live_masses())),
      "springs:", len(list(restored.live_springs())))
