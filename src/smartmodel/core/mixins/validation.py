"""
ValidationMixin: self-validating models.

✅ Validation flow:
1. ``validating`` listeners may veto
2. rules come from the call or from the class ``rules``; empty rules pass
3. attributes may be hydrated from the current input source
4. the rule engine runs and its messages replace the stored ones
5. ``validated`` listeners are notified
"""

import logging
from typing import Any, ClassVar, Dict, List, Mapping, Optional, TYPE_CHECKING

from ...adapters.input import get_current_input
from ...validation import MessageBag, Validator, normalize_rules
from ..exceptions import ValidationFailedError, ValidationVetoedError

if TYPE_CHECKING:
    from ...validation import ValidationFactory

logger = logging.getLogger(__name__)


class ValidationMixin:
    """
    Validation capabilities mixin.

    Class options:
        rules: Default rule set, ``{"email": "required|email"}``
        custom_messages: Default message overrides
        throw_on_validation: Raise instead of returning False
        auto_hydrate_entity_from_input: Fill an empty model from the current input
        force_entity_hydration_from_input: Always fill from the current input
        external_validator: Skip flashing input to the session on failure
        validation_factory: Factory used by ``make_validator``
    """

    rules: ClassVar[Mapping[str, Any]] = {}
    custom_messages: ClassVar[Mapping[str, str]] = {}

    throw_on_validation: ClassVar[bool] = False
    auto_hydrate_entity_from_input: ClassVar[bool] = False
    force_entity_hydration_from_input: ClassVar[bool] = False
    external_validator: ClassVar[bool] = False
    validation_factory: ClassVar[Optional["ValidationFactory"]] = None

    def validate(self, rules: Optional[Mapping[str, Any]] = None,
                 messages: Optional[Mapping[str, str]] = None) -> bool:
        """
        Validate the model's attributes.

        Args:
            rules: Rules to use instead of the class ``rules``
            messages: Message overrides to use instead of ``custom_messages``

        Returns:
            True when every rule passes

        Raises:
            ValidationVetoedError: a ``validating`` listener vetoed, with ``throw_on_validation``
            ValidationFailedError: a rule failed, with ``throw_on_validation``
        """
        if self.fire_model_event("validating") is False:
            logger.debug(f"Validation of {type(self).__name__} vetoed")
            if self.throw_on_validation:
                raise ValidationVetoedError(self, self._validation_errors)
            return False

        rules = self.get_effective_rules(rules)
        if not rules:
            success = True
            self._validation_errors = MessageBag()
        else:
            success = self._run_validator(rules, self.custom_messages if messages is None else messages)

        self.fire_model_event("validated", halt=False)

        if not success and self.throw_on_validation:
            raise ValidationFailedError(self, self._validation_errors)
        return success

    def _run_validator(self, rules: Dict[str, List[Any]], messages: Mapping[str, str]) -> bool:
        source = get_current_input()
        if self.force_entity_hydration_from_input or (
            not self._attributes and self.auto_hydrate_entity_from_input
        ):
            self.fill(source.all())

        result = self.make_validator(self.get_attributes(), rules, messages).evaluate()

        if result.passed:
            self._validation_errors = MessageBag()
        else:
            self._validation_errors = result.messages
            if not self.external_validator and source.has_session():
                source.flash()

        logger.debug(f"{type(self).__name__} validation {'passed' if result.passed else 'failed'}")
        return result.passed

    def get_effective_rules(self, rules: Optional[Mapping[str, Any]] = None) -> Dict[str, List[Any]]:
        """Explicit rules, else the class rules, without fields whose rule list is empty."""
        source = self.rules if rules is None else rules
        return {field: field_rules for field, field_rules in normalize_rules(source).items() if field_rules}

    @classmethod
    def make_validator(cls, data: Mapping[str, Any], rules: Mapping[str, Any],
                       messages: Optional[Mapping[str, str]] = None) -> Validator:
        factory = cls.validation_factory
        if factory is None:
            from ...app.configurator import get_validation_factory
            factory = get_validation_factory()
        return factory.make(data, rules, messages)

    def errors(self) -> MessageBag:
        return self._validation_errors
