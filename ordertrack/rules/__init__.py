from ordertrack.rules.loader import load_rules
from ordertrack.rules.models import Rules, SortDefault, default_rules

__all__ = ["Rules", "SortDefault", "default_rules", "load_rules"]
