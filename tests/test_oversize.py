"""
Oversize / join tests — OversizeJoinResolver.

Tests:
1-2. Threshold: exactly at max fits, 1mm over is oversize
3.   Lengthwise join (3800mm piece on a 3200mm slab)
4.   Widthwise join
5.   Multi-join grid
6-7. Material slab size (own or by category) overrides the configured maximum
8.   Missing join rate raises only when a join is needed
9-10. Even split puts the remainder last and never exceeds the maximum
11.  Join advisories are carried on the oversize breakdown
"""

import pytest

from stonequote.calculators.oversize import OversizeJoinResolver
from stonequote.calculators.shape_geometry import ShapeGeometryResolver
from stonequote.errors import MissingRateConfig
from stonequote.models import JoinStrategy, JoinOrientation, PricingBasis
from stonequote.schemas import PieceSpec, MaterialCatalogEntry, WarningCode


resolver = OversizeJoinResolver()


def _resolve(length, width, rates, material=None):
    piece = PieceSpec(id="big", length_mm=length, width_mm=width)
    geometry = ShapeGeometryResolver().resolve(piece)
    return resolver.resolve(piece, geometry, material, rates)


# ============================================================
# Threshold
# ============================================================

def test_exactly_at_max_is_normal(rates):
    oversize, warnings = _resolve(3200, 1600, rates)
    assert oversize is None
    assert warnings == []


def test_one_mm_over_is_oversize(rates):
    oversize, _ = _resolve(3201, 600, rates)
    assert oversize is not None
    assert oversize.is_oversize is True


# ============================================================
# Strategies
# ============================================================

def test_lengthwise_join(rates):
    oversize, warnings = _resolve(3800, 600, rates)
    assert oversize.strategy == JoinStrategy.LENGTHWISE
    assert oversize.join_count == 1
    assert oversize.join_length_lm == pytest.approx(0.6)
    assert oversize.join_cost == 51.00
    assert [s.length_mm for s in oversize.segments] == [1900, 1900]
    assert oversize.joins[0].orientation == JoinOrientation.VERTICAL
    # Join lands on the centre line
    assert any("near centre" in w.message for w in warnings)
    assert all(w.code == WarningCode.OVERSIZE_JOIN for w in warnings)


def test_widthwise_join(rates):
    oversize, warnings = _resolve(3000, 2000, rates)
    assert oversize.strategy == JoinStrategy.WIDTHWISE
    assert oversize.join_count == 1
    assert oversize.join_length_lm == pytest.approx(3.0)
    assert oversize.joins[0].orientation == JoinOrientation.HORIZONTAL
    assert "waterfall" in warnings[0].message


def test_multi_join_grid(rates):
    oversize, warnings = _resolve(4000, 2000, rates)
    assert oversize.strategy == JoinStrategy.MULTI_JOIN
    assert len(oversize.segments) == 4
    assert oversize.join_count == 3
    # One vertical join across the width, one horizontal along the length
    assert oversize.join_length_lm == pytest.approx(2.0 + 4.0)
    assert "4 slabs and 2 joins" in warnings[0].message


# ============================================================
# Workable maximum
# ============================================================

def test_material_slab_size_overrides_configured_max(rates, marble):
    # Marble slab 3200 less 20mm trim each end leaves 3160mm
    oversize, _ = _resolve(3180, 600, rates, material=marble)
    assert oversize is not None
    assert oversize.max_length_mm == 3160

    oversize, _ = _resolve(3180, 600, rates)
    assert oversize is None


def test_missing_join_rate(rates):
    rates = rates.model_copy(update={"join_rate": None})
    oversize, _ = _resolve(3000, 600, rates)
    assert oversize is None
    with pytest.raises(MissingRateConfig):
        _resolve(3800, 600, rates)


def test_even_split_remainder_last(rates):
    oversize, _ = _resolve(3201, 600, rates)
    assert [s.length_mm for s in oversize.segments] == [1601, 1600]
    assert oversize.joins[0].position_mm == 1601


def test_even_split_stays_within_fractional_maximum():
    sizes = resolver._even_split(6319, 3159.5)
    assert sizes == [3159.5, 3159.5]
    assert all(size <= 3159.5 for size in sizes)


def test_category_slab_size_without_explicit_dimensions(rates):
    # Natural stone slab is 2800mm, 2760mm once trimmed
    granite = MaterialCatalogEntry(
        id="granite", name="Absolute Black", category="granite",
        pricing_basis=PricingBasis.PER_SQM, price_per_sqm=520.00,
    )
    oversize, _ = _resolve(2900, 600, rates, material=granite)
    assert oversize is not None
    assert oversize.strategy == JoinStrategy.LENGTHWISE
    assert oversize.max_length_mm == 2760
    assert all(s.length_mm <= 2760 for s in oversize.segments)

    oversize, _ = _resolve(2900, 600, rates)
    assert oversize is None


# ============================================================
# Advisories
# ============================================================

def test_oversize_breakdown_carries_its_warnings(rates):
    oversize, warnings = _resolve(4000, 2000, rates)
    assert [w.code for w in oversize.warnings] == [WarningCode.OVERSIZE_JOIN] * 2
    assert oversize.warnings == warnings
