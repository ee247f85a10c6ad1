# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Quickstart: read accounts and tax rules from the AvaTax sandbox.

Set AVATAX_USERNAME and AVATAX_PASSWORD (or an account ID and license key),
plus AVATAX_COMPANY_ID for the tax rule listing, then run:

    python examples/quickstart.py
"""

import logging
import os
import sys
from pathlib import Path

# Add src to PYTHONPATH for local runs
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from Avalara.AvaTax.client import AvaTaxClient
from Avalara.AvaTax.core._auth import BasicCredential
from Avalara.AvaTax.core.config import AvaTaxConfig
from Avalara.AvaTax.core.results import is_error
from Avalara.AvaTax.core.telemetry import TelemetryConfig


def main() -> int:
    username = os.environ.get("AVATAX_USERNAME")
    password = os.environ.get("AVATAX_PASSWORD")
    if not username or not password:
        print("Set AVATAX_USERNAME and AVATAX_PASSWORD; exiting.")
        return 1

    logging.basicConfig(level=logging.INFO)
    config = AvaTaxConfig(
        app_name="Quickstart",
        app_version="1.0",
        telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG"),
    )

    with AvaTaxClient(BasicCredential(username, password), "sandbox", config) as client:
        accounts = client.accounts.query_accounts(top=5)
        if is_error(accounts):
            print({"error": accounts.error_code.value, "message": accounts.message})
            return 1
        print(f"Showing {len(accounts)} of {accounts.record_count} accounts")
        for account in accounts:
            print({"id": account.get("id"), "name": account.get("name")})

        company_id = os.environ.get("AVATAX_COMPANY_ID")
        if not company_id:
            return 0

        count = 0
        for page in client.iter_pages("list_tax_rules", int(company_id), top=50, order_by="id ASC"):
            if is_error(page):
                print({"error": page.error_code.value, "message": page.message})
                return 1
            count += len(page)
        print(f"Company {company_id} has {count} tax rules")

        missing = client.tax_rules.get_tax_rule(int(company_id), 999999999)
        if is_error(missing):
            print({"expected_error": missing.error_code.value, "service_code": missing.service_code})
    return 0


if __name__ == "__main__":
    sys.exit(main())
