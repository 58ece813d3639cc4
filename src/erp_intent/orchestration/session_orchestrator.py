"""
Session orchestrator - the resolution state machine.

FRESH -> RESOLVED | AWAITING_PARAMETERS | InsufficientConfidence
AWAITING_PARAMETERS -> RESOLVED (session deleted) | AWAITING_PARAMETERS

Unknown or expired session ids are FRESH. The store is the only shared
mutable state; a follow-up holds its session's lock for the whole
read-modify-write.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from ..catalog import CatalogRegistry
from ..exceptions import (
    InsufficientConfidence,
    ModuleNotPermitted,
    PayloadValidationError,
    ResolutionError,
)
from ..interaction import CrudAction, IntentClassifier, IntentResult, TextNormalizer
from ..memory import PendingResolution, Session, SessionStore, SessionSweeper
from ..models import ResolvedAction
from ..resolution import EndpointMatcher, ModuleNameResolver, ParameterExtractor
from ..schemas import AwaitingParameters, CallerContext, InterpretRequest, InterpretResponse, Resolved
from ..security import PermissionPolicy
from ..vocabulary import VocabularyIndex
from .prompts import missing_parameters_prompt

logger = logging.getLogger(__name__)

PREVIEW_OUTPUT = "preview"


class SessionOrchestrator:
    """
    Runs the local resolution pipeline and owns pending sessions.

    Pipeline: normalize -> classify -> permission check -> select endpoint
    -> extract parameters -> resolve or ask for missing parameters.
    """

    def __init__(
        self,
        index: VocabularyIndex,
        catalogs: CatalogRegistry,
        store: Optional[SessionStore] = None,
        confidence_gate: Optional[float] = None,
        sweep_interval_seconds: Optional[float] = None,
    ):
        """
        :param index: Vocabulary index
        :param catalogs: Endpoint catalogs per ERP
        :param store: Session store (a default 15-minute store if None)
        :param confidence_gate: Minimum endpoint score; defaults to the
                                vocabulary's min_confidence
        :param sweep_interval_seconds: Background sweep interval; None
                                       disables the sweeper
        """
        self._index = index
        self._catalogs = catalogs
        self._store = store or SessionStore()
        self.confidence_gate = index.min_confidence if confidence_gate is None else confidence_gate

        self._normalizer = TextNormalizer(index)
        self._classifier = IntentClassifier(index)
        self._matcher = EndpointMatcher(index, self._normalizer)
        self._extractor = ParameterExtractor(index)
        self._module_resolver = ModuleNameResolver(index)

        self._sweeper = (
            SessionSweeper(self._store, sweep_interval_seconds)
            if sweep_interval_seconds is not None
            else None
        )

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def normalizer(self) -> TextNormalizer:
        return self._normalizer

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    @property
    def matcher(self) -> EndpointMatcher:
        return self._matcher

    # --- Lifecycle ---
    def start(self) -> None:
        if self._sweeper is not None:
            self._sweeper.start()

    def shutdown(self) -> None:
        if self._sweeper is not None:
            self._sweeper.stop()

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_running

    # --- Entry point ---
    def handle(self, request: InterpretRequest) -> InterpretResponse:
        """
        Resolve a request, continuing its session when one is pending.

        :raises ResolutionError: recoverable resolution failures
        :raises PayloadValidationError: if a completed payload is malformed
        """
        if request.session_id:
            with self._store.lock_session(request.session_id) as session:
                if session is not None and self._same_caller(session, request.context):
                    return self._continue(session, request)
            logger.info(f"Session {request.session_id} not found or expired, treating as fresh")

        return self._resolve_fresh(request)

    # --- FRESH ---
    def classify(self, message: str, context: CallerContext, module: Optional[str] = None) -> IntentResult:
        """
        Classify a message for a caller, honoring an explicit module.

        :raises ModuleNotPermitted: explicit module unresolvable or not allowed
        """
        allowed = PermissionPolicy.allowed_modules(context.permissions.modules)
        text = self._normalizer.normalize(message)

        explicit = module or self._module_resolver.extract_mention(message)
        if explicit:
            resolution = self._module_resolver.resolve(explicit, candidates=allowed)
            if not resolution.is_resolved():
                raise ModuleNotPermitted(
                    explicit,
                    allowed,
                    available_actions=self._allowed_action_names(context),
                )
            action, action_score = self._classifier.classify_action(text)
            return IntentResult(resolution.module, action, resolution.confidence + action_score)

        return self._classifier.classify(text, allowed)

    def _resolve_fresh(self, request: InterpretRequest) -> InterpretResponse:
        context = request.context
        permissions = context.permissions
        text = self._normalizer.normalize(request.message)

        try:
            intent = self.classify(request.message, context, request.module)
            if intent.provisional:
                raise InsufficientConfidence(intent.score)

            PermissionPolicy.validate(intent.module, intent.action, permissions.modules, permissions.actions)

            catalog = self._catalogs.get(context.erp_id)
            candidates = catalog.lookup(intent.module, intent.action)
            endpoint, score = self._matcher.select_endpoint(text, intent.module, intent.action, candidates)

            if score < self.confidence_gate:
                raise InsufficientConfidence(score)
        except ResolutionError as e:
            self._attach_options(e, context)
            raise

        payload = self._extractor.build_payload(endpoint, request.message)
        pending = PendingResolution(
            module=intent.module,
            action=intent.action,
            endpoint=endpoint,
            payload=payload,
            confidence=round(score, 4),
            erp_id=context.erp_id,
            url=catalog.build_url(endpoint),
            messages=(request.message,),
        )

        if not pending.missing_paths:
            logger.info(f"Resolved '{request.message}' -> {endpoint.http_method} {endpoint.route} ({score:.2f})")
            return Resolved(self._finalize(pending))

        session = self._store.create(pending, context)
        return self._awaiting(session)

    # --- AWAITING_PARAMETERS ---
    def _continue(self, session: Session, request: InterpretRequest) -> InterpretResponse:
        # Caller holds the session lock
        pending = session.pending
        permissions = request.context.permissions
        try:
            PermissionPolicy.validate(pending.module, pending.action, permissions.modules, permissions.actions)
        except ResolutionError as e:
            self._attach_options(e, request.context)
            raise

        # Optional fields still empty may be supplied too; filled values are kept
        fillable = pending.payload.empty_fields(pending.endpoint)
        values = self._extractor.extract_missing(request.message, fillable, pending.endpoint)
        session.record_message(request.message)

        if values:
            session.update_payload(pending.payload.with_values(pending.endpoint, values))
            logger.debug(f"Session {session.id} filled {sorted(values)}")

        if session.is_complete():
            resolved = self._finalize(self._rescore(session.pending))
            self._store.discard(session)
            logger.info(f"Session {session.id} completed -> {pending.endpoint.route}")
            return Resolved(resolved)

        return self._awaiting(session)

    # --- Helpers ---
    def _finalize(self, pending: PendingResolution) -> ResolvedAction:
        errors = pending.payload.validate(pending.endpoint)
        if errors:
            raise PayloadValidationError(pending.endpoint.route, errors)

        payload = pending.payload.to_dict()
        return ResolvedAction(
            module=pending.module,
            action=pending.action.value,
            endpoint_route=pending.endpoint.route,
            http_method=pending.endpoint.http_method,
            payload=payload,
            confidence=pending.confidence,
            endpoint_id=pending.endpoint.id,
            url=pending.url,
            preview=payload if pending.endpoint.output_type == PREVIEW_OUTPUT else {},
        )

    def _rescore(self, pending: PendingResolution) -> PendingResolution:
        """Score the pending endpoint against every turn, as if sent as one message."""
        text = self._normalizer.normalize(" ".join(pending.messages))
        score = self._matcher.score_endpoint(text, pending.module, pending.action, pending.endpoint)
        return replace(pending, confidence=round(score.total, 4))

    @staticmethod
    def _awaiting(session: Session) -> AwaitingParameters:
        pending = session.pending
        return AwaitingParameters(
            needs_parameters=list(session.missing_parameters),
            message=missing_parameters_prompt(pending.action, pending.module, session.missing_parameters),
            session_id=session.id,
            module=pending.module,
            action=pending.action.value,
            endpoint_route=pending.endpoint.route,
        )

    @staticmethod
    def _same_caller(session: Session, context: CallerContext) -> bool:
        original = session.caller_context
        if original is None or getattr(original, "erp_id", None) == context.erp_id:
            return True
        logger.warning(f"Session {session.id} belongs to another ERP, ignoring it")
        return False

    @staticmethod
    def _allowed_action_names(context: CallerContext) -> List[str]:
        allowed = PermissionPolicy.allowed_actions(context.permissions.actions)
        return [a.value for a in CrudAction if a in allowed]

    def _attach_options(self, error: ResolutionError, context: CallerContext) -> None:
        if not error.available_modules:
            error.available_modules = PermissionPolicy.allowed_modules(context.permissions.modules)
        if not error.available_actions:
            error.available_actions = self._allowed_action_names(context)
