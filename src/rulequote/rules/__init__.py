"""Rules subpackage - tier rules loading and the active rules store."""
from .loader import RulesConfigError, load_rules_config, rules_config_from_dict
from .store import RulesStore

__all__ = ['RulesConfigError', 'load_rules_config', 'rules_config_from_dict', 'RulesStore']
