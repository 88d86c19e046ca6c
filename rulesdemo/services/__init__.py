from .business_logic import BusinessLogic
from .discount_service import DiscountService
from .rules_engine_service import RulesEngineService

__all__ = ["BusinessLogic", "DiscountService", "RulesEngineService"]
