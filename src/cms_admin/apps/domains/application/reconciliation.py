"""Reconciliation of persisted domains with their filesystem configs."""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cms_admin.apps.domains.domain.codec import ConfigCodec, ParseError
from cms_admin.apps.domains.domain.drift import DriftDetector
from cms_admin.apps.domains.domain.exceptions import (
    DomainValidationError,
    PersistenceError,
    ReconciliationStateError
)
from cms_admin.apps.domains.domain.interfaces import (
    ConfigSourceInterface,
    DomainStoreInterface,
    ValidatorInterface
)
from cms_admin.apps.domains.domain.legacy import migrate_legacy_variables
from cms_admin.apps.domains.domain.models import (
    DomainEntity,
    DriftResult,
    FlowAction,
    FlowState,
    PendingEdit
)

logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGE = 'Could not parse domain definition JSON.'

WARNING_DRIFT = 'drift'
WARNING_NOT_IN_FILESYSTEM = 'not_in_filesystem'

WARNING_MESSAGES = {
    WARNING_DRIFT: 'The filesystem config of this domain is different from the current config. '
                   'You can use the diff tool to update the config.',
    WARNING_NOT_IN_FILESYSTEM: 'This domain configuration comes from the database and not from the file '
                               'system at the moment. Please save this domain to create a config file in '
                               'the filesystem.',
}


@dataclass
class ReconciliationOutcome:
    """What the presentation layer needs to render one step of the flow."""
    state: FlowState
    seed: str = ""
    drift: Optional[DriftResult] = None
    diff_against: Optional[str] = None
    warnings: List[Dict[str, str]] = field(default_factory=list)
    errors: Dict[str, List[str]] = field(default_factory=dict)
    form_disabled: bool = False
    original: Optional[str] = None
    updated: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.state == FlowState.COMMITTED


class ReconciliationFlow:
    """
    Drives one update of a domain config from seeding to commit.

    start() seeds the editor and lands in EDITING. Each handle() call
    validates the submitted text from the entry snapshot:
    SUBMIT previews (AWAITING_CONFIRMATION), CONFIRM commits, BACK
    restores the snapshot. Nothing is persisted before a CONFIRM whose
    validation found no violations.
    """

    def __init__(
            self,
            codec: ConfigCodec,
            validator: ValidatorInterface,
            store: DomainStoreInterface,
            config_source: ConfigSourceInterface,
            drift_detector: Optional[DriftDetector] = None
    ):
        self.codec = codec
        self.validator = validator
        self.store = store
        self.config_source = config_source
        self.drift_detector = drift_detector or DriftDetector(codec)

        self.entity: Optional[DomainEntity] = None
        self._snapshot: Optional[DomainEntity] = None
        self._state = FlowState.SEEDING

    @property
    def state(self) -> FlowState:
        return self._state

    def _transition(self, new_state: FlowState) -> None:
        if new_state != self._state:
            logger.debug(f"Reconciliation of {self.entity!r}: {self._state} -> {new_state}")
        self._state = new_state

    def start(self, entity: DomainEntity) -> ReconciliationOutcome:
        """
        Seed the flow for an entity.

        Raises:
            ConfigSourceError: if the filesystem config cannot be read or parsed
            ConfigParseError: if legacy variables cannot be migrated
        """
        self.entity = entity
        self._transition(FlowState.SEEDING)

        warnings = []
        diff_against = None
        key = entity.domain_key

        if not self.config_source.exists(key):
            config = self.codec.serialize(entity)
            if entity.config_variables:
                config = migrate_legacy_variables(config, entity.config_variables)

            entity.config = config
            entity.mark_config_changed()
            drift = DriftResult.missing()
            seed = entity.config
            warnings.append(WARNING_NOT_IN_FILESYSTEM)
            logger.info(f"Domain '{key}' has no filesystem config, seeded from the database")
        else:
            text = self.config_source.read(key)
            drift = self.drift_detector.detect(entity, text)

            if drift.has_drift:
                diff_against = self.codec.serialize(entity)
                seed = drift.filesystem_config
                warnings.append(WARNING_DRIFT)
            else:
                seed = text

            entity.config = text

        self._snapshot = entity.snapshot()
        self._transition(FlowState.EDITING)

        return ReconciliationOutcome(
            state=self._state,
            seed=seed,
            drift=drift,
            diff_against=diff_against,
            warnings=[{'code': code, 'message': WARNING_MESSAGES[code]} for code in warnings],
        )

    def handle(self, edit: PendingEdit) -> ReconciliationOutcome:
        """
        Apply one user action to the flow.

        Raises:
            ReconciliationStateError: if the flow was not started or is already committed
            PersistenceError: if committing fails
        """
        if self.entity is None or self._state == FlowState.SEEDING:
            raise ReconciliationStateError("Reconciliation has not been started")
        if self._state == FlowState.COMMITTED:
            raise ReconciliationStateError(f"Domain '{self.entity.domain_key}' is already committed")

        action = FlowAction(edit.action)

        # Every attempt starts from the entry snapshot
        self.entity.restore(self._snapshot)

        if action == FlowAction.BACK:
            self._transition(FlowState.EDITING)
            return ReconciliationOutcome(state=self._state, seed=edit.config_text)

        self._transition(FlowState.VALIDATING)

        result = self.codec.parse(edit.config_text)
        if isinstance(result, ParseError):
            logger.info(f"Rejected config of domain '{self.entity.domain_key}': {result.message}")
            self._transition(FlowState.FAILED)
            return ReconciliationOutcome(
                state=self._state,
                seed=edit.config_text,
                errors={'config': [PARSE_ERROR_MESSAGE]},
            )

        candidate = result.entity
        candidate.config = self.codec.serialize(candidate)
        original = self.codec.serialize(self._snapshot)

        self.entity.set_from_entity(candidate)
        violations = self.validator.validate(self.entity)

        if violations:
            self.entity.restore(self._snapshot)
            self._transition(FlowState.EDITING)
            return ReconciliationOutcome(
                state=self._state,
                seed=edit.config_text,
                errors=DomainValidationError(violations).as_field_errors(),
                original=original,
                updated=candidate.config,
            )

        if action == FlowAction.SUBMIT:
            self._transition(FlowState.AWAITING_CONFIRMATION)
            return ReconciliationOutcome(
                state=self._state,
                seed=edit.config_text,
                form_disabled=True,
                original=original,
                updated=candidate.config,
            )

        try:
            self.store.persist(self.entity)
            self.store.flush()
        except PersistenceError:
            self._transition(FlowState.FAILED)
            raise

        logger.info(f"Committed new config of domain '{self.entity.domain_key}'")
        self._transition(FlowState.COMMITTED)
        return ReconciliationOutcome(
            state=self._state,
            seed=self.entity.config,
            original=original,
            updated=candidate.config,
        )
