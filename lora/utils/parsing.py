import json
import re
from typing import Any, Optional, Dict


def extract_json_block(text: str) -> Optional[Dict[str, Any]]:
    """Extract the first valid JSON object from text."""
    if not text:
        return None
    
    start = text.find("{")
    if start == -1:
        return None
    
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                candidate = text[start : i + 1]
                try:
                    return json.loads(candidate)
                except json.JSONDecodeError:
                    try:
                        cleaned = re.sub(r"[\x00-\x1f]", "", candidate)
                        return json.loads(cleaned)
                    except json.JSONDecodeError:
                        return None
    return None

def parse_numeric_value(val: Any) -> Optional[float]:
    """Parse a numeric value such as ``87``, ``"87%"`` or ``"0.87"``."""
    if val is None or isinstance(val, bool):
        return None
    try:
        s = str(val).strip().replace(",", "").replace("%", "")
        m = re.match(r"^(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)", s)
        return float(m.group(1)) if m else float(s)
    except (ValueError, TypeError):
        return None


def coerce_confidence(val: Any, default: int = 50) -> int:
    """Clamp a verifier-reported confidence to an integer percentage."""
    number = parse_numeric_value(val)
    if number is None:
        return default
    if 0 < number < 1:
        number *= 100
    return int(max(0, min(100, round(number))))


def normalize_verdict(val: Any) -> str:
    """``"Mostly True"`` / ``"mostly-true"`` -> ``"mostly_true"``; empty becomes ``""``."""
    if not isinstance(val, str):
        return ""
    return re.sub(r"[\s\-]+", "_", val.strip().lower())
