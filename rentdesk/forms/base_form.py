"""
Shared state machine for the record forms.

A form moves EMPTY -> EDITING -> {INVALID, VALID} -> SUBMITTED. Each rule
checks one aspect of the current values and is re-run whenever one of the
fields it watches changes. Submitting re-runs every rule and reports all
failures at once; the submit callback only runs when none fail.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    EMPTY = "empty"
    EDITING = "editing"
    INVALID = "invalid"
    VALID = "valid"
    SUBMITTED = "submitted"


class BaseForm:
    # rule name -> method name returning an error message or None
    rules: Dict[str, str] = {}
    # field name -> rule names re-run when the field changes
    triggers: Dict[str, Tuple[str, ...]] = {}

    def __init__(self, record: Any = None):
        self.record = record
        self.values: Dict[str, Any] = self.seed_from(record) if record is not None else self.defaults()
        self.errors: Dict[str, str] = {}
        self._touched = False
        self._submitted = False

    # -- seeding ------------------------------------------------------------

    def defaults(self) -> Dict[str, Any]:
        raise NotImplementedError

    def seed_from(self, record: Any) -> Dict[str, Any]:
        raise NotImplementedError

    @property
    def is_edit(self) -> bool:
        return self.record is not None

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> FormState:
        if self._submitted:
            return FormState.SUBMITTED
        if not self._touched:
            return FormState.EDITING if self.is_edit else FormState.EMPTY
        return FormState.VALID if self.is_valid else FormState.INVALID

    def check(self, rule: str) -> Optional[str]:
        return getattr(self, self.rules[rule])()

    def check_all(self) -> Dict[str, str]:
        """Evaluate every rule and return the failing ones."""
        errors = {}
        for rule in self.rules:
            message = self.check(rule)
            if message:
                errors[rule] = message
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.check_all()

    # -- editing ------------------------------------------------------------

    def normalize(self, field: str, value: Any) -> Any:
        return value

    def set(self, field: str, value: Any):
        """Change one field and re-run the rules that watch it."""
        if field not in self.values:
            raise KeyError(f"Unknown form field '{field}'")

        self.values[field] = self.normalize(field, value)
        self._touched = True
        self._submitted = False
        self._recheck(self.triggers.get(field, ()))

    def _recheck(self, rules):
        for rule in rules:
            message = self.check(rule)
            if message:
                self.errors[rule] = message
            else:
                self.errors.pop(rule, None)

    # -- submission ---------------------------------------------------------

    def payload(self):
        raise NotImplementedError

    def validate_all(self) -> bool:
        """Re-run every rule, surfacing all failures together."""
        self._touched = True
        self.errors = self.check_all()
        if self.errors:
            logger.debug(f"{type(self).__name__} blocked: {sorted(self.errors)}")
        return not self.errors

    async def submit(self, on_submit: Callable[[Any], Any]) -> Any:
        """Validate and, only if every rule passes, hand the payload over.

        Args:
            on_submit: Called with the payload; may be sync or async

        Returns:
            The callback's result, or None when the form is invalid
        """
        if not self.validate_all():
            return None

        result = on_submit(self.payload())
        if inspect.isawaitable(result):
            result = await result
        self._submitted = True
        return result
