import pytest

from babelfont.errors import DeltaError, VariationModelError
from babelfont.variationModel import VariationModel


@pytest.fixture
def model():
    return VariationModel([{}, {"wght": 1.0}, {"wdth": 1.0}], ["wght", "wdth"])


def test_requires_origin():
    with pytest.raises(VariationModelError, match="origin"):
        VariationModel([{"wght": 1.0}, {"wght": -1.0}])


def test_duplicate_locations():
    with pytest.raises(VariationModelError):
        VariationModel([{}, {"wght": 1.0}, {"wght": 1.0}])


def test_interpolate_from_masters(model):
    masters = [(0, 100), (100, 200), (50, 100)]
    assert list(model.interpolateFromMasters({}, masters)) == [0, 100]
    assert list(model.interpolateFromMasters({"wght": 0.5}, masters)) == [50, 150]
    assert list(model.interpolateFromMasters({"wght": 1.0, "wdth": 1.0}, masters)) == [
        150,
        200,
    ]


def test_get_deltas(model):
    deltas = model.getDeltas([(10,), (30,), (5,)])
    # deltas come in the order of the model's sorted supports
    assert sorted(d[0] for d in deltas) == [-5, 10, 20]
    assert list(model.interpolateFromDeltas({"wdth": 0.5}, deltas)) == [7.5]


def test_master_count_mismatch(model):
    with pytest.raises(DeltaError, match="Expected 3 master values, got 2"):
        model.getDeltas([(0,), (1,)])


def test_vector_length_mismatch(model):
    with pytest.raises(DeltaError, match="differ in length"):
        model.getDeltas([(0, 1), (1,), (2, 3)])


def test_supports(model):
    assert len(model.supports) == 3
