"""
Fabrication line item tests — FabricationLineItemCalculator.

Tests:
1-2.   Cutting by perimeter / by area
3-4.   Polishing by Lm / by face area
5-7.   Edge items (per Lm, minimum charge, zero omitted)
8-10.  Cutouts (per unit, thickness multiplier, minimum charge, bad quantity)
11-13. Lamination (none, one layer, partial layer)
14-16. Installation units and optional rate
17-20. Missing rates raise MissingRateConfig (lamination only with a layer to build)
21.    Subtotal excludes installation
"""

import pytest
from pydantic import ValidationError

from stonequote.calculators.edge_measurer import EdgeLinearMeasurer
from stonequote.calculators.fabrication import FabricationLineItemCalculator
from stonequote.calculators.shape_geometry import ShapeGeometryResolver
from stonequote.errors import MissingRateConfig
from stonequote.models import ServiceUnit, LaminationMethod
from stonequote.schemas import PieceSpec, CutoutSpec


def _calculate(piece, rates):
    geometry = ShapeGeometryResolver().resolve(piece)
    runs = EdgeLinearMeasurer().measure(piece, geometry)
    return FabricationLineItemCalculator().calculate(piece, geometry, runs, rates)


def _sample_piece(**kw):
    fields = {"id": "p1", "length_mm": 2000, "width_mm": 600}
    fields.update(kw)
    return PieceSpec(**fields)


# ============================================================
# Cutting and polishing
# ============================================================

def test_cutting_by_perimeter(rates):
    fab = _calculate(_sample_piece(), rates)
    assert fab.cutting.quantity == pytest.approx(5.2)
    assert fab.cutting.total == round(5.2 * 17.50, 2)
    assert fab.cutting.unit == "Lm"


def test_cutting_by_area(rates):
    rates = rates.model_copy(update={"cutting_unit": ServiceUnit.SQUARE_METRE})
    fab = _calculate(_sample_piece(), rates)
    assert fab.cutting.quantity == pytest.approx(1.2)
    assert fab.cutting.total == 21.00


def test_polishing_by_finished_edge_length(rates):
    fab = _calculate(_sample_piece(edge_top="pencil_round", edge_left="pencil_round"), rates)
    assert fab.polishing.quantity == pytest.approx(2.6)
    assert fab.polishing.total == 117.00


def test_polishing_by_face_area(rates):
    rates = rates.model_copy(update={"polishing_unit": ServiceUnit.SQUARE_METRE})
    fab = _calculate(_sample_piece(edge_top="pencil_round"), rates)
    # 2.0 Lm × 0.020 m face
    assert fab.polishing.quantity == pytest.approx(0.04)
    assert fab.polishing.total == 1.80


# ============================================================
# Edges
# ============================================================

def test_edge_item_per_linear_metre(rates):
    fab = _calculate(_sample_piece(length_mm=3200, edge_top="pencil_round"), rates)
    assert len(fab.edges) == 1
    item = fab.edges[0]
    assert item.side == "top"
    assert item.total == 57.60
    assert "Pencil Round" in item.description


def test_edge_minimum_charge(rates):
    fab = _calculate(_sample_piece(edge_left="curved"), rates)
    item = fab.edges[0]
    # 0.6 Lm × $300 = $180, floored to $300
    assert item.total == 300.00
    assert item.minimum_applied is True


def test_raw_piece_has_no_edge_items(rates):
    fab = _calculate(_sample_piece(), rates)
    assert fab.edges == []
    assert fab.polishing.total == 0


# ============================================================
# Cutouts
# ============================================================

def test_cutouts_per_unit(rates):
    piece = _sample_piece(cutouts=[CutoutSpec(cutout_type_id="undermount_sink"),
                                   CutoutSpec(cutout_type_id="tap_hole", quantity=2)])
    fab = _calculate(piece, rates)
    assert [c.total for c in fab.cutouts] == [300.00, 130.00]


def test_cutout_thickness_multiplier_on_laminated_piece(rates):
    rates = rates.model_copy(update={"cutout_thickness_multiplier": 1.5})
    piece = _sample_piece(thickness_mm=40, cutouts=[CutoutSpec(cutout_type_id="tap_hole")])
    fab = _calculate(piece, rates)
    assert fab.cutouts[0].total == 97.50
    assert fab.cutouts[0].thickness_multiplier == 1.5


def test_cutout_minimum_charge(rates):
    fab = _calculate(_sample_piece(cutouts=[CutoutSpec(cutout_type_id="gpo")]), rates)
    assert fab.cutouts[0].total == 50.00


def test_zero_quantity_cutout_omitted(rates):
    fab = _calculate(_sample_piece(cutouts=[CutoutSpec(cutout_type_id="tap_hole", quantity=0)]), rates)
    assert fab.cutouts == []


def test_negative_cutout_quantity_rejected():
    with pytest.raises(ValidationError):
        CutoutSpec(cutout_type_id="tap_hole", quantity=-1)


# ============================================================
# Lamination
# ============================================================

def test_base_thickness_not_laminated(rates):
    fab = _calculate(_sample_piece(edge_top="pencil_round"), rates)
    assert fab.lamination.method == LaminationMethod.NONE
    assert fab.lamination.total == 0


def test_40mm_is_one_layer(rates):
    fab = _calculate(_sample_piece(thickness_mm=40, edge_top="pencil_round"), rates)
    assert fab.lamination.method == LaminationMethod.LAMINATED
    assert fab.lamination.layers == 1
    # 2.0 Lm × $70 × 1
    assert fab.lamination.total == 140.00


def test_30mm_is_laminated_with_zero_full_layers(rates):
    fab = _calculate(_sample_piece(thickness_mm=30, edge_top="pencil_round"), rates)
    assert fab.lamination.method == LaminationMethod.LAMINATED
    assert fab.lamination.layers == 0
    assert fab.lamination.total == 0


# ============================================================
# Installation
# ============================================================

def test_installation_per_square_metre(rates):
    fab = _calculate(_sample_piece(), rates)
    assert fab.installation.total == 168.00


def test_installation_per_linear_metre_uses_outer_perimeter(rates):
    rates = rates.model_copy(update={"installation_unit": ServiceUnit.LINEAR_METRE,
                                     "installation_rate": 10.0})
    fab = _calculate(_sample_piece(), rates)
    assert fab.installation.total == 52.00


def test_installation_optional(rates):
    rates = rates.model_copy(update={"installation_rate": None})
    fab = _calculate(_sample_piece(), rates)
    assert fab.installation.total == 0


# ============================================================
# Missing rates
# ============================================================

def test_missing_cutting_rate(rates):
    with pytest.raises(MissingRateConfig):
        _calculate(_sample_piece(), rates.model_copy(update={"cutting_rate": None}))


def test_missing_lamination_rate_only_matters_when_laminated(rates):
    rates = rates.model_copy(update={"lamination_rate": None})
    _calculate(_sample_piece(), rates)
    with pytest.raises(MissingRateConfig):
        _calculate(_sample_piece(thickness_mm=40), rates)


def test_30mm_needs_no_lamination_rate(rates):
    rates = rates.model_copy(update={"lamination_rate": None})
    fab = _calculate(_sample_piece(thickness_mm=30, edge_top="pencil_round"), rates)
    assert fab.lamination.layers == 0
    assert fab.lamination.total == 0


def test_unknown_edge_profile(rates):
    with pytest.raises(MissingRateConfig) as exc:
        _calculate(_sample_piece(edge_top="waterfall"), rates)
    assert exc.value.piece_id == "p1"


def test_unknown_cutout_type(rates):
    with pytest.raises(MissingRateConfig):
        _calculate(_sample_piece(cutouts=[CutoutSpec(cutout_type_id="cooktop")]), rates)


# ============================================================
# Subtotal
# ============================================================

def test_subtotal_excludes_installation(rates):
    fab = _calculate(_sample_piece(edge_top="pencil_round",
                                   cutouts=[CutoutSpec(cutout_type_id="tap_hole")]), rates)
    expected = (fab.cutting.total + fab.polishing.total + sum(e.total for e in fab.edges)
                + sum(c.total for c in fab.cutouts) + fab.lamination.total)
    assert fab.subtotal == round(expected, 2)
    assert fab.installation.total > 0
