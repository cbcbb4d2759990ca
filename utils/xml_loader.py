# utils/xml_loader.py
import xml.etree.ElementTree as ET
from typing import Any, Dict
from pathlib import Path

from utils.currency import clean_currency, clean_percent

CURRENCY_FIELDS = ["spend", "subject_401k_withdrawal_limit", "partner_401k_withdrawal_limit", "minimum_withdrawal"]
PERCENT_FIELDS = [
    "inflation_rate",
    "retirement_account_rate_of_return",
    "roth_rate_of_return",
    "savings_rate_of_return",
    "flat_ss_withholding_rate",
    "flat_trad401k_withholding_rate",
    "immaterial_percentage",
]


def parse_setup_xml(file_path) -> Dict[str, Dict[str, Any]]:
    """
    Load the default setup into {"fiscal": {...}, "demographics": {...}}.
    Currency strings ("$80,000") and percent strings ("2.5%") are normalized.
    """
    tree = ET.parse(file_path)
    root = tree.getroot()

    setup_dict: Dict[str, Dict[str, Any]] = {}

    for section in root:
        values: Dict[str, Any] = {}
        for sub in section:
            if sub.tag in CURRENCY_FIELDS:
                val = clean_currency(sub.text)
            elif sub.tag in PERCENT_FIELDS:
                val = clean_percent(sub.text)
            else:
                val = try_cast(sub.text)
            if sub.tag == "filing_status" and isinstance(val, str):
                val = val.strip().lower()
            values[sub.tag] = val
        setup_dict[section.tag] = values

    return setup_dict


def try_cast(value: str) -> Any:
    """Casts "true"/"false" to bool, then tries int and float; otherwise keeps the string."""
    if value is None:
        return None
    text = value.strip()
    if text.lower() in ("true", "false"):
        return text.lower() == "true"

    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


CONFIG_DIR = Path(__file__).parent.parent / "config"

DEFAULT_SETUP = parse_setup_xml(CONFIG_DIR / "default_setup.xml")
