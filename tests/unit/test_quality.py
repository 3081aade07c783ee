"""
Unit Tests - Data Quality
"""
import pytest
import polars as pl

from ecommerce_dashboard.quality import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_fact_validator,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"id": [1, 2, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": [1, None, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1
        assert result.errors[0].name == "not_null_id"

    def test_unique_check_ignores_nulls(self):
        """Absent product ids are not duplicates"""
        df = pl.DataFrame({"product_id": [1, None, None, 2]})

        validator = DataValidator()
        validator.add_unique_check("product_id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": [1, 2, 1]})

        validator = DataValidator()
        validator.add_unique_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_range_check(self):
        """Test range check"""
        df = pl.DataFrame({"rating": [1.0, 5.0, 0.5, 6.0, None]})

        validator = DataValidator()
        validator.add_range_check("rating", min_value=1, max_value=5)

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        # Two values outside range: 0.5 and 6.0
        assert result.checks[0].failed_rows == 2

    def test_positive_check_excluding_zero(self):
        df = pl.DataFrame({"weight": [0.0, 10.0]})

        validator = DataValidator()
        validator.add_positive_check("weight", allow_zero=False)

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_warning_gives_partial_status(self):
        df = pl.DataFrame({"price": [-1.0, 2.0]})

        validator = DataValidator()
        validator.add_positive_check("price", severity=ValidationSeverity.WARNING)

        result = validator.validate(df)

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1
        assert result.errors == []

    def test_strict_mode_fails_on_warning(self):
        df = pl.DataFrame({"price": [-1.0, 2.0]})

        validator = DataValidator(strict_mode=True)
        validator.add_positive_check("price", severity=ValidationSeverity.WARNING)

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_missing_column(self):
        df = pl.DataFrame({"other": [1]})

        validator = DataValidator()
        validator.add_not_null_check("price")

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_custom_check(self):
        """Test custom validation check"""
        df = pl.DataFrame({"revenue": [100.0, 200.0, 300.0]})

        validator = DataValidator()
        validator.add_custom_check(
            name="revenue_sum",
            check_func=lambda df: df["revenue"].sum() < 1000,
            message_on_fail="Sum exceeds 1000",
        )

        result = validator.validate(df)

        # Sum is 600, which is < 1000
        assert result.status == ValidationStatus.PASSED

    def test_custom_check_error_fails(self):
        df = pl.DataFrame({"revenue": [1.0]})

        validator = DataValidator()
        validator.add_custom_check(
            name="broken",
            check_func=lambda df: df["missing"].sum() > 0,
            message_on_fail="never",
        )

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert "error" in result.checks[0].message


class TestFactValidator:
    """Tests for the pre-built fact validator"""

    def test_clean_store_passes(self, catalog_store):
        result = create_fact_validator().validate(catalog_store.frame)

        assert result.errors == []
        assert result.total_checks > 0
        assert result.success_rate == pytest.approx(100.0)

    def test_non_finite_revenue_is_an_error(self, catalog_store):
        frame = catalog_store.frame.with_columns(pl.lit(float("nan")).alias("revenue"))

        result = create_fact_validator().validate(frame)

        assert [check.name for check in result.errors] == ["revenue_finite"]
