# MIT License (see LICENSE)
import numpy as np
from spring_sim.system import System


def test_eval_selection_copies_shared_values_only():
    """
    Two selected masses share their mass but not their elasticity: the
    current mass is taken from them, the current elasticity is left alone.
    """
    system = System()
    a = system.add_mass(100.0, 100.0, mass=3.0, elastic=0.5)
    b = system.add_mass(200.0, 100.0, mass=3.0, elastic=0.7)
    system.select_object(a, True)
    system.select_object(b, True)

    changed = system.eval_selection()

    assert changed
    assert system.state.mass == 3.0
    assert system.state.elasticity == 1.0


def test_eval_selection_damping_checked_independently():
    """Springs with different stiffness but equal damping still share damping."""
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)
    c = system.add_mass(300.0, 100.0)
    s1 = system.add_spring(a, b, ks=2.0, kd=0.25)
    s2 = system.add_spring(b, c, ks=5.0, kd=0.25)
    system.select_object(s1, False)
    system.select_object(s2, False)

    assert system.eval_selection()
    assert system.state.kd == 0.25
    assert system.state.ks == 1.0


def test_eval_selection_unchanged_returns_false():
    system = System()
    a = system.add_mass(100.0, 100.0)
    system.select_object(a, True)
    assert not system.eval_selection()


def test_eval_selection_fixed_flag():
    system = System()
    a = system.add_mass(100.0, 100.0, fixed=True)
    b = system.add_mass(200.0, 100.0, fixed=False)
    system.select_object(a, True)
    system.select_object(b, True)

    system.eval_selection()
    assert system.state.fix_mass


def test_select_object_shift_toggles():
    system = System()
    a = system.add_mass(100.0, 100.0)
    system.select_object(a, True, shifted=True)
    assert system.get_mass(a).selected
    system.select_object(a, True, shifted=True)
    assert not system.get_mass(a).selected


def test_select_objects_rectangle_is_strict():
    system = System()
    inside = system.add_mass(150.0, 150.0)
    edge = system.add_mass(200.0, 150.0)
    far = system.add_mass(400.0, 150.0)
    s_in = system.add_spring(inside, edge)
    s_out = system.add_spring(edge, far)

    system.select_objects(100.0, 100.0, 200.0, 200.0)

    assert system.get_mass(inside).selected
    assert not system.get_mass(edge).selected
    assert not system.get_mass(far).selected
    assert not system.get_spring(s_in).selected
    assert not system.get_spring(s_out).selected

    system.unselect_all()
    system.select_objects(100.0, 100.0, 250.0, 200.0)
    assert system.get_spring(s_in).selected
    assert not system.get_spring(s_out).selected


def test_duplicate_selected_rewires_springs():
    """
    Duplicating two connected masses and their spring yields a spring that
    references only the new masses, and the originals keep their selection.
    """
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(150.0, 100.0)
    s = system.add_spring(a, b)
    system.select_all()
    n_masses = system.mass_count()
    n_springs = system.spring_count()

    system.duplicate_selected()

    assert system.mass_count() == n_masses + 2
    assert system.spring_count() == n_springs + 1
    new_a, new_b = n_masses, n_masses + 1
    twin = system.get_spring(n_springs)
    print("duplicate spring", twin.m1, twin.m2)

    assert {twin.m1, twin.m2} == {new_a, new_b}
    assert twin.alive and not twin.selected
    assert system.get_mass(new_a).parents == [n_springs]
    assert system.get_mass(new_b).parents == [n_springs]
    assert not system.get_mass(new_a).selected
    assert system.get_mass(a).selected
    assert system.get_mass(a).parents == [s]
    assert np.array_equal(system.get_mass(new_b).position, system.get_mass(b).position)


def test_duplicate_spring_without_masses_is_dropped():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(150.0, 100.0)
    s = system.add_spring(a, b)
    system.select_object(s, False)

    system.duplicate_selected()

    assert not system.get_spring(system.spring_count() - 1).alive
    assert system.get_mass(a).parents == [s]


def test_duplicate_half_selected_spring_keeps_original_endpoint():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(150.0, 100.0)
    s = system.add_spring(a, b)
    system.select_object(a, True)
    system.select_object(s, False)

    system.duplicate_selected()

    j = system.spring_count() - 1
    twin = system.get_spring(j)
    new_a = system.mass_count() - 1
    assert (twin.m1, twin.m2) == (new_a, b)
    assert j in system.get_mass(b).parents
    assert j in system.get_mass(new_a).parents


def test_move_and_velocity_edits():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)
    system.select_object(a, True)

    system.move_selected_masses(5.0, -5.0)
    system.set_mass_velocity(1.0, 2.0)
    system.set_mass_velocity(1.0, 0.0, relative=True)

    assert np.allclose(system.get_mass(a).position, [105.0, 95.0])
    assert np.allclose(system.get_mass(a).velocity, [2.0, 2.0])
    assert np.allclose(system.get_mass(b).position, [200.0, 100.0])
    assert np.allclose(system.get_mass(b).velocity, [0.0, 0.0])


def test_temp_fixed_round_trip():
    """Dragging fixes movable masses temporarily; already fixed ones stay fixed."""
    system = System()
    free = system.add_mass(100.0, 100.0)
    nailed = system.add_mass(200.0, 100.0, fixed=True)
    system.select_all()

    system.set_temp_fixed(True)
    assert system.get_mass(free).fixed and system.get_mass(free).temp_fixed
    assert system.get_mass(nailed).fixed and not system.get_mass(nailed).temp_fixed

    system.set_temp_fixed(False)
    assert not system.get_mass(free).fixed
    assert system.get_mass(nailed).fixed


def test_set_rest_length_uses_current_length():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(160.0, 180.0)
    s = system.add_spring(a, b, restlen=10.0)
    system.select_object(s, False)

    system.set_rest_length()
    assert system.get_spring(s).restlen == 100.0


def test_set_center_requires_single_mass():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)

    system.select_object(a, True)
    system.select_object(b, True)
    system.set_center()
    assert system.state.center_id == -1

    system.unselect_all()
    system.select_object(b, True)
    system.set_center()
    assert system.state.center_id == b

    system.clear_center()
    assert system.state.center_id == -1


def test_selected_parameter_edits():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)
    s = system.add_spring(a, b)
    system.select_object(a, True)
    system.select_object(s, False)

    system.set_selected_mass(4.0)
    system.set_selected_elasticity(0.3)
    system.set_selected_ks(8.0)
    system.set_selected_kd(0.5)

    assert system.get_mass(a).mass == 4.0 and system.get_mass(b).mass == 1.0
    assert system.get_mass(a).elastic == 0.3
    assert system.get_spring(s).ks == 8.0 and system.get_spring(s).kd == 0.5
    assert system.state.mass == 4.0 and system.state.ks == 8.0


def test_set_selected_fixed_clears_temp_flag():
    system = System()
    a = system.add_mass(100.0, 100.0)
    system.select_object(a, True)
    system.set_temp_fixed(True)

    system.set_selected_fixed(True)
    system.set_temp_fixed(False)

    m = system.get_mass(a)
    assert m.fixed and not m.temp_fixed
    assert system.state.fix_mass


def test_select_objects_takes_lower_then_upper_corner():
    """y points up: the first corner is the lower left one."""
    system = System()
    low = system.add_mass(150.0, 120.0)
    high = system.add_mass(150.0, 280.0)

    system.select_objects(x0=100.0, y0=100.0, x1=200.0, y1=200.0)

    assert system.get_mass(low).selected
    assert not system.get_mass(high).selected
