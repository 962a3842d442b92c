from datetime import date
from decimal import Decimal, InvalidOperation


def to_decimal(v: object) -> Decimal:
    """任意の値を Decimal に変換する

    Pydantic の field_validator (mode="before") から呼び出すことを想定。
    float は str 経由で変換し、2進数の誤差を持ち込まない。
    """
    if isinstance(v, Decimal):
        return v
    try:
        return Decimal(str(v))
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {v}") from e


def to_iso_date(v: object) -> date:
    """YYYY-MM-DD 形式の文字列（または date）を date に変換する"""
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v))
    except ValueError as e:
        raise ValueError(f"Invalid date format: {v}") from e


def blank_to_none(v: object) -> object:
    """空白だけの文字列を None として扱う"""
    if isinstance(v, str) and not v.strip():
        return None
    return v
