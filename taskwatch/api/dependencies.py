"""Route Dependencies — builds retirement services from the process-wide db_manager.

Invariants:
    - Services are cheap to construct; built per request, never cached globally
    - Trigger enablement read from settings at request time

Design Decisions:
    - Resolved through get_db_manager() at call time so tests can swap the
      manager the same way they override get_db
"""

from taskwatch.config import get_settings
from taskwatch.infrastructure.database import get_db_manager
from taskwatch.services.retirement_evaluator import RetirementEvaluator
from taskwatch.services.retirement_sweep import RetirementSweep
from taskwatch.services.retirement_triggers import RetirementTriggers


def get_retirement_evaluator() -> RetirementEvaluator:
    return RetirementEvaluator(get_db_manager().session)


def get_retirement_triggers() -> RetirementTriggers:
    return RetirementTriggers(
        get_retirement_evaluator(),
        enabled=get_settings().retirement_triggers_enabled,
    )


def get_retirement_sweep() -> RetirementSweep:
    return RetirementSweep(get_db_manager().session)
