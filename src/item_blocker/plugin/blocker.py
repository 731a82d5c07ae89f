"""ItemBlocker: main entry point for host integration.

The facade wires together the policy store, alias index, timed window,
evaluation engine, dispatch gate and audit logger, and exposes the host
lifecycle:

- ``initialize(last_epoch_time)`` : arm the window, build the index, gate channels
- ``on_new_save()``               : a wipe happened; restart the timed window
- ``check_access(attempt)``       : evaluate one access attempt
- ``modify(...)`` / ``reload()``  : runtime policy edits
- ``unload()``                    : release channels and drop the index

Every store mutation and the index rebuild that must follow it run under a
single lock, so a reader never sees an index that disagrees with the store.

Example
-------
>>> blocker = ItemBlocker.from_path(Path("item_blocker.json"), registrar=host)
>>> blocker.initialize(last_epoch_time=save_created_at)
>>> decision = blocker.can_equip_item("Assault Rifle", "rifle.ak", subject)
>>> decision.allowed
False
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path

from item_blocker.audit.logger import AuditLogger
from item_blocker.dispatch.gate import DispatchGate, EventRegistrar
from item_blocker.errors import ConfigNotWritable
from item_blocker.plugin.access import AccessAttempt, AccessDecision, AccessKind, Subject
from item_blocker.plugin.authorization import AuthorizationProvider, Caller
from item_blocker.plugin.config_loader import BlockerConfig, ConfigLoader
from item_blocker.plugin.exemptions import ExemptionChain
from item_blocker.plugin.messages import MessageCatalog, render_block_message
from item_blocker.policies.engine import EvaluationEngine, Verdict
from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import BlockKind, MutationOutcome, PolicyStore, ResourceClass
from item_blocker.policies.window import Clock, TemporalWindow

logger = logging.getLogger(__name__)


class ItemBlocker:
    """Owns all blocker state for one host process.

    Parameters
    ----------
    config:
        Loaded configuration.  Defaults are used when omitted.
    config_path:
        Where edits are persisted and ``reload`` reads from.  When ``None``
        the blocker is in-memory only.
    config_loader:
        Optional :class:`ConfigLoader` override (for testing).
    registrar:
        Host event registration interface used by the dispatch gate.
    authorization:
        Permission provider for bypass and admin checks.
    exemptions:
        Optional exemption chain (duel plugins and similar).
    catalog:
        Message catalogue for notifications and command replies.
    audit:
        Audit logger override.  Built from ``config.audit`` when omitted.
    clock:
        Callable returning the current UTC time.
    """

    def __init__(
        self,
        config: BlockerConfig | None = None,
        *,
        config_path: Path | None = None,
        config_loader: ConfigLoader | None = None,
        registrar: EventRegistrar | None = None,
        authorization: AuthorizationProvider | None = None,
        exemptions: ExemptionChain | None = None,
        catalog: MessageCatalog | None = None,
        audit: AuditLogger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config_loader = config_loader or ConfigLoader()
        self._config = config or self._config_loader.defaults()
        self._config_path = Path(config_path) if config_path is not None else None
        self._writable = True
        self._authorization = authorization
        self._exemptions = exemptions or ExemptionChain()
        self._catalog = catalog or MessageCatalog()
        self._audit = audit or AuditLogger(
            self._config.audit.log_dir,
            base_name=self._config.audit.base_name,
            clock=clock,
        )
        self._lock = threading.RLock()

        self._store = PolicyStore()
        self._store.load_from_persisted(self._config.persisted_lists())
        self._index = AliasIndex.build(self._store)
        self._window = TemporalWindow(self._config.block_duration_hours, clock=clock)
        self._engine = EvaluationEngine(self._index, self._window)
        self._gate = DispatchGate(registrar)

    @classmethod
    def from_path(cls, config_path: Path, **kwargs: object) -> "ItemBlocker":
        """Load ``config_path`` (or defaults) and build a blocker around it."""
        loader = kwargs.pop("config_loader", None) or ConfigLoader()
        config, writable = loader.load_with_status(Path(config_path))  # type: ignore[union-attr]
        blocker = cls(config, config_path=Path(config_path), config_loader=loader, **kwargs)  # type: ignore[arg-type]
        blocker._writable = writable
        return blocker

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, last_epoch_time: datetime | None = None) -> None:
        """Arm the window from the last wipe time and gate channels.

        Anchoring to the wipe time rather than now means a restart inside
        the window does not reset the countdown.
        """
        with self._lock:
            self._window.arm_from(last_epoch_time)
            self._index.rebuild(self._store)
            self._gate.apply(self._index)
        logger.info(
            "ItemBlocker initialised; timed window ends %s UTC",
            self._window.block_end.strftime("%Y-%m-%d %H:%M:%S"),
        )

    def on_new_save(self) -> datetime:
        """Epoch event: restart the timed window at now + duration."""
        return self._window.on_epoch()

    def unload(self) -> None:
        """Unsubscribe every channel and drop the index."""
        with self._lock:
            self._gate.release()
            self._index.clear()

    # ------------------------------------------------------------------
    # Policy edits
    # ------------------------------------------------------------------

    def modify(
        self,
        add: bool,
        resource_class: ResourceClass,
        kind: BlockKind,
        alias: str,
    ) -> MutationOutcome:
        """Add or remove one alias; rebuild and re-gate when it changed."""
        with self._lock:
            if add:
                outcome = self._store.add(resource_class, kind, alias)
            else:
                outcome = self._store.remove(resource_class, kind, alias)
            if outcome.changed:
                self._index.rebuild(self._store)
                self._gate.apply(self._index)
        return outcome

    def reload(self) -> BlockerConfig:
        """Re-read persisted lists and settings without a restart.

        The new duration applies from the next wipe; the current window end
        is left as it is.
        """
        with self._lock:
            if self._config_path is not None:
                self._config, self._writable = self._config_loader.load_with_status(self._config_path)
            self._store.load_from_persisted(self._config.persisted_lists())
            self._window.set_duration_hours(self._config.block_duration_hours)
            self._index.rebuild(self._store)
            self._gate.apply(self._index)
        logger.info("ItemBlocker configuration reloaded (%d entries)", len(self._store))
        return self._config

    def save(self) -> None:
        """Persist the current lists.  No-op for an in-memory blocker.

        Raises
        ------
        OSError:
            When the configuration file cannot be written.
        ConfigNotWritable:
            When the file on disk failed to load and the lists in memory are
            a defaults fallback.
        """
        with self._lock:
            self._config = self._config.with_lists(self._store.to_persisted())
            if self._config_path is None:
                return
            if not self._writable:
                raise ConfigNotWritable(
                    f"{self._config_path} could not be loaded; fix it and reload before editing."
                )
            self._config_loader.save(self._config, self._config_path)

    # ------------------------------------------------------------------
    # Access checks
    # ------------------------------------------------------------------

    def check_access(self, attempt: AccessAttempt) -> AccessDecision:
        """Evaluate one attempt, notify-render and audit on deny."""
        subject = attempt.subject
        if subject is None or self.should_skip(subject):
            return AccessDecision(Verdict.ALLOW, skipped=True)

        verdict = self._engine.evaluate(
            attempt.display_alias, attempt.short_alias, attempt.kind.resource_class
        )
        if verdict is Verdict.ALLOW:
            return AccessDecision(verdict)

        remaining = self._window.remaining() if verdict is Verdict.TIMED_DENY else None
        message = render_block_message(
            self._catalog,
            attempt.kind,
            verdict,
            remaining,
            prefix=self._config.chat_prefix,
            color=self._config.chat_prefix_color,
            language=subject.language,
        )
        try:
            self._audit.log_denial(
                subject.name,
                subject.id,
                attempt.kind.log_category,
                attempt.display_alias,
                attempt.short_alias,
                subject.position,
            )
        except OSError as exc:
            logger.warning("Could not write audit entry: %s", exc)
        return AccessDecision(verdict, remaining=remaining, message=message)

    def can_equip_item(self, display_alias: str | None, short_alias: str | None, subject: Subject | None) -> AccessDecision:
        return self.check_access(AccessAttempt(AccessKind.EQUIP, display_alias, short_alias, subject))

    def can_wear_item(self, display_alias: str | None, short_alias: str | None, subject: Subject | None) -> AccessDecision:
        return self.check_access(AccessAttempt(AccessKind.WEAR, display_alias, short_alias, subject))

    def on_magazine_reload(self, display_alias: str | None, short_alias: str | None, subject: Subject | None) -> AccessDecision:
        return self.check_access(AccessAttempt(AccessKind.RELOAD, display_alias, short_alias, subject))

    def can_build(self, display_alias: str | None, short_alias: str | None, subject: Subject | None) -> AccessDecision:
        return self.check_access(AccessAttempt(AccessKind.DEPLOY, display_alias, short_alias, subject))

    def should_skip(self, subject: Subject | None) -> bool:
        """Cheap checks first: absent, NPC, exempt, bypass permission."""
        if subject is None or subject.looks_like_npc():
            return True
        handle = subject.handle if subject.handle is not None else subject
        return self._exemptions.is_exempt(handle) or self.is_bypass(subject)

    def is_bypass(self, subject: Subject) -> bool:
        return self._has_permission(subject.id, self._config.bypass_permission)

    def is_authorized(self, caller: Caller | None) -> bool:
        """Console (``None``) and admins are always authorized."""
        if caller is None or caller.is_admin:
            return True
        return self._has_permission(caller.id, self._config.admin_permission)

    def _has_permission(self, subject_id: str, permission: str) -> bool:
        if self._authorization is None:
            return False
        try:
            return bool(self._authorization.has_permission(subject_id, permission))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Authorization check for %s failed: %s", permission, exc)
            return False

    # ------------------------------------------------------------------
    # Properties for direct subsystem access
    # ------------------------------------------------------------------

    @property
    def config(self) -> BlockerConfig:
        return self._config

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    @property
    def writable(self) -> bool:
        """``False`` while running on defaults because the config file failed to load."""
        return self._writable

    @property
    def store(self) -> PolicyStore:
        return self._store

    @property
    def index(self) -> AliasIndex:
        return self._index

    @property
    def window(self) -> TemporalWindow:
        return self._window

    @property
    def engine(self) -> EvaluationEngine:
        return self._engine

    @property
    def gate(self) -> DispatchGate:
        return self._gate

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog
