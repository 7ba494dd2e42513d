"""
Shared pytest fixtures for the Data Insight Framework tests.
"""

import pytest
from click.testing import CliRunner

PRODUCT_CSV = "product,price,sales\niPhone,999,1500\nSamsung,899,1200\nPixel,799,900\n"


@pytest.fixture
def runner():
    """Click test runner for CLI commands."""
    return CliRunner()


@pytest.fixture
def product_csv(tmp_path):
    """Three-row product sales CSV written to a temporary directory."""
    path = tmp_path / "products.csv"
    path.write_text(PRODUCT_CSV, encoding="utf-8")
    return path


@pytest.fixture
def product_sales_input():
    """Smallest valid analysis input: one text and two numeric columns."""
    return {
        "headers": ["product", "price", "sales"],
        "sampleData": [["iPhone", 999, 1500], ["Samsung", 899, 1200]],
    }
