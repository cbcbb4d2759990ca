from models import FiscalParameters, Demographics
from utils.xml_loader import DEFAULT_SETUP
from dataclasses import fields
from typing import Dict, Any, Type, TypeVar

T = TypeVar("T")


def _build(cls: Type[T], defaults: Dict[str, Any], overrides: Dict[str, Any]) -> T:
    """
    Merges defaults with overrides and keeps only the keys `cls` declares,
    using reflection (dataclasses.fields) so stray inputs are ignored.
    """
    inputs_dict = dict(defaults)
    inputs_dict.update(overrides)

    field_names = {f.name for f in fields(cls)}
    final_inputs = {
        key: value
        for key, value in inputs_dict.items()
        if key in field_names
    }
    return cls(**final_inputs)


def get_fiscal_parameters(**kwargs: Any) -> FiscalParameters:
    """
    FiscalParameters from the XML defaults, overridden by any keyword inputs.
    `year_index` is accepted as an alternative to `tax_year`.
    """
    defaults = DEFAULT_SETUP.get("fiscal", {})
    if "year_index" in kwargs:
        base_year = kwargs.get("tax_base_year", defaults.get("tax_base_year", defaults["tax_year"]))
        kwargs["tax_year"] = base_year + kwargs.pop("year_index")
    return _build(FiscalParameters, defaults, kwargs)


def get_demographics(**kwargs: Any) -> Demographics:
    """
    Demographics from the XML defaults, overridden by any keyword inputs.
    Passing `partner_age=None` produces a single-person profile.
    """
    defaults = dict(DEFAULT_SETUP.get("demographics", {}))
    if "partner_age" in kwargs and kwargs["partner_age"] is None:
        for key in ("partner_ss_start_age", "partner_pension_start_age", "partner_life_span"):
            defaults.pop(key, None)
        defaults["filing_status"] = "single"
    return _build(Demographics, defaults, kwargs)
