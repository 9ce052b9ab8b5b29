"""Unit tests for the tier policy."""
import pytest
from decimal import Decimal
from fanstake.core.tiers import (
    MIN_STAKE,
    Tier,
    progress_to_next_tier,
    tier_for,
    tiers,
    to_decimal,
)

@pytest.mark.parametrize("amount,expected", [
    (0, Tier.NONE),
    ("99.999", Tier.NONE),
    (100, Tier.BRONZE),
    ("499.99", Tier.BRONZE),
    (500, Tier.SILVER),
    (999, Tier.SILVER),
    (1000, Tier.GOLD),
    ("2499.99", Tier.GOLD),
    (2500, Tier.PLATINUM),
    (1_000_000, Tier.PLATINUM),
])
def test_tier_thresholds(amount, expected):
    """Test tier boundaries match the thresholds exactly."""
    assert tier_for(amount).tier == expected

def test_tier_apy():
    """Test each tier carries its APY."""
    assert tier_for(0).apy == 0
    assert tier_for(100).apy == Decimal("0.05")
    assert tier_for(500).apy == Decimal("0.07")
    assert tier_for(1000).apy == Decimal("0.10")
    assert tier_for(2500).apy == Decimal("0.15")

def test_no_tier_has_no_benefits():
    info = tier_for(50)
    assert info.name == "None"
    assert info.benefits == []

def test_benefits_escalate():
    """Test higher tiers keep lower tier access and add more."""
    bronze = tier_for(100).benefits
    platinum = tier_for(2500).benefits
    assert "Prediction access" in bronze
    assert "Prediction access" in platinum
    assert "Governance" in platinum
    assert "Governance" not in bronze
    assert len(platinum) > len(bronze)

@pytest.mark.parametrize("amount,expected", [
    (-10, 0.0),
    (0, 0.0),
    (250, 50.0),
    (500, 0.0),
    (750, 50.0),
    (1000, 0.0),
    (1750, 50.0),
    (2500, 100.0),
    (10000, 100.0),
])
def test_progress_to_next_tier(amount, expected):
    """Test progress interpolates within bands and saturates at Platinum."""
    assert progress_to_next_tier(amount) == pytest.approx(expected)

def test_progress_stays_in_range():
    for amount in range(0, 3000, 37):
        progress = progress_to_next_tier(amount)
        assert 0.0 <= progress <= 100.0

def test_tier_catalog_order():
    """Test the catalog lists tiers from lowest to highest."""
    catalog = tiers()
    assert [info.name for info in catalog] == ["Bronze", "Silver", "Gold", "Platinum"]
    assert [info.min_amount for info in catalog] == [
        Decimal("100"), Decimal("500"), Decimal("1000"), Decimal("2500")
    ]
    assert catalog[0].min_amount == MIN_STAKE

def test_tier_catalog_is_a_copy():
    catalog = tiers()
    catalog[0].benefits.append("Free tickets")
    assert "Free tickets" not in tiers()[0].benefits

def test_to_decimal_avoids_float_noise():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("100") == Decimal("100")
    assert to_decimal(5) == Decimal(5)
