import dataclasses

import pytest

from frenet_path.config import PlanningConfig


def test_replace_changes_only_the_given_field():
    base = PlanningConfig()
    changed = dataclasses.replace(base, optimization_method="KPC", safety_margin=0.0)
    assert changed.optimization_method == "KPC"
    assert changed.safety_margin == 0.0
    base_fields = dataclasses.asdict(base)
    changed_fields = dataclasses.asdict(changed)
    differing = {k for k in base_fields if base_fields[k] != changed_fields[k]}
    assert differing <= {"optimization_method", "safety_margin"}


def test_asdict_round_trip():
    cfg = PlanningConfig(car_width=2.1, car_length=4.13, rear_axle_to_center=1.9)
    assert PlanningConfig(**dataclasses.asdict(cfg)) == cfg


def test_fields_are_mutable():
    cfg = PlanningConfig()
    cfg.enable_computation_time_output = True
    cfg.enable_raw_output = False
    assert cfg.enable_computation_time_output is True
    assert cfg.enable_raw_output is False


@pytest.mark.parametrize(
    "name",
    ["car_width", "car_length", "wheel_base", "output_spacing", "epsilon"],
)
def test_non_positive_dimensions_rejected(name):
    with pytest.raises(ValueError, match=name):
        PlanningConfig(**{name: 0.0})


@pytest.mark.parametrize("name", ["safety_margin", "expected_safety_margin", "max_steering_angle"])
def test_negative_margins_rejected(name):
    with pytest.raises(ValueError, match=name):
        PlanningConfig(**{name: -0.1})


def test_zero_safety_margin_accepted():
    cfg = PlanningConfig(safety_margin=0.0)
    assert cfg.safety_margin == 0.0