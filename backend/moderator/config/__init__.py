from moderator.config.config_loader import load_role_balance, load_role_templates
from moderator.config.config_validator import ConfigValidator, ValidationResult

__all__ = ["load_role_balance", "load_role_templates", "ConfigValidator", "ValidationResult"]
