# app/utils/unit_formatter.py

from datetime import datetime

from app.schemas.settings_schema import DisplaySettings

KG_TO_LB = 2.20462
CM_PER_INCH = 2.54
ML_PER_OZ = 29.5735


def format_weight(weight_kg: float, display: DisplaySettings) -> str:
    if display.units.weight == "lb":
        return f"{weight_kg * KG_TO_LB:.1f} lb"
    return f"{weight_kg:.1f} kg"


def format_height(height_cm: float, display: DisplaySettings) -> str:
    if display.units.height == "inch":
        return f"{height_cm / CM_PER_INCH:.1f} in"
    return f"{height_cm:.1f} cm"


def format_temperature(celsius: float, display: DisplaySettings) -> str:
    if display.units.temperature == "fahrenheit":
        return f"{celsius * 9 / 5 + 32:.1f}°F"
    return f"{celsius:.1f}°C"


def format_volume(volume_ml: float, display: DisplaySettings) -> str:
    if display.units.volume == "oz":
        return f"{volume_ml / ML_PER_OZ:.1f} oz"
    return f"{volume_ml:.0f} ml"


def format_date(moment: datetime, display: DisplaySettings) -> str:
    return moment.strftime(display.date_format)


def format_time(moment: datetime, display: DisplaySettings) -> str:
    return moment.strftime(display.time_format)
