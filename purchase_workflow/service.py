"""WorkflowService: load, mutate and save purchase workflows by purchase id."""
import logging
from collections.abc import Callable, Iterable
from typing import Any

from purchase_workflow.core.attachment import Attachment
from purchase_workflow.core.catalog import DEFAULT_CATALOG
from purchase_workflow.core.cost import CostDraft
from purchase_workflow.core.errors import WorkflowError, WorkflowExistsError
from purchase_workflow.core.schema import StageCatalog
from purchase_workflow.core.workflow import Workflow
from purchase_workflow.engine import mutations
from purchase_workflow.engine.workflow import create_workflow, ensure_editable, finalize
from purchase_workflow.services.attachment_store.base import AttachmentStore, Upload
from purchase_workflow.services.workflow_store.base import WorkflowStore
from purchase_workflow.services.yard_directory.base import YardDirectory

logger = logging.getLogger("purchase_workflow.service")


class WorkflowService:
    """Application service in front of the pure engine.

    Every mutation loads the stored workflow, applies one engine operation and
    saves the result. Rejected operations are logged and re-raised; nothing is
    saved for them, nor for operations that leave the workflow unchanged.
    Yards and attachments are looked up only after the finalization lock has
    been checked.
    """

    def __init__(
        self,
        store: WorkflowStore,
        attachments: AttachmentStore,
        yards: YardDirectory,
        catalog: StageCatalog = DEFAULT_CATALOG,
        default_currency: str = "JPY",
    ):
        self.store = store
        self.attachments = attachments
        self.yards = yards
        self.catalog = catalog
        self.default_currency = default_currency

    def create(self, purchase_id: str, currency: str | None = None) -> Workflow:
        if self.store.exists(purchase_id):
            raise WorkflowExistsError(purchase_id)
        workflow = create_workflow(purchase_id, currency or self.default_currency, self.catalog)
        saved = self.store.save(workflow)
        logger.info(f"Workflow created: purchase_id={purchase_id}, currency={saved.currency}")
        return saved

    def get(self, purchase_id: str) -> Workflow:
        return self.store.load(purchase_id)

    def delete(self, purchase_id: str) -> None:
        self.store.delete(purchase_id)
        logger.info(f"Workflow deleted: purchase_id={purchase_id}")

    def set_task(
        self,
        purchase_id: str,
        stage_key: str,
        task_key: str,
        completed: bool,
        actor: str,
        notes: str | None = None,
        cost: CostDraft | None = None,
        cost_attachment_id: str | None = None,
        attachment_ids: Iterable[str] = (),
    ) -> Workflow:
        """Complete or uncomplete a task.

        Attachments are referenced by the ids `upload_attachment` returned and
        resolved against the attachment store after the lock check.
        """
        attachment_ids = tuple(attachment_ids)

        def operation(workflow: Workflow) -> Workflow:
            ensure_editable(workflow)
            return mutations.set_task(
                workflow, stage_key, task_key, completed, actor,
                notes=notes,
                cost=self._resolve_cost(cost, cost_attachment_id),
                attachments=[self.attachments.require(a) for a in attachment_ids],
                catalog=self.catalog,
            )

        return self._mutate(
            purchase_id,
            f"{'complete' if completed else 'uncomplete'} {stage_key}.{task_key}",
            actor,
            operation,
        )

    def select_yard(self, purchase_id: str, stage_key: str, yard_id: str | None, actor: str) -> Workflow:
        def operation(workflow: Workflow) -> Workflow:
            ensure_editable(workflow)
            yard = self.yards.require(yard_id) if yard_id is not None else None
            return mutations.select_yard(workflow, stage_key, yard, catalog=self.catalog)

        return self._mutate(purchase_id, f"select yard {yard_id} for {stage_key}", actor, operation)

    def update_fields(self, purchase_id: str, stage_key: str, fields: dict[str, Any], actor: str) -> Workflow:
        return self._mutate(
            purchase_id,
            f"update {stage_key} fields {sorted(fields)}",
            actor,
            lambda wf: mutations.update_stage_fields(wf, stage_key, fields, catalog=self.catalog),
        )

    def add_cost(
        self,
        purchase_id: str,
        stage_key: str,
        draft: CostDraft,
        actor: str,
        attachment_id: str | None = None,
    ) -> Workflow:
        def operation(workflow: Workflow) -> Workflow:
            ensure_editable(workflow)
            return mutations.add_workflow_cost(
                workflow, stage_key, self._resolve_cost(draft, attachment_id), actor, catalog=self.catalog,
            )

        return self._mutate(purchase_id, f"add cost to {stage_key}.{draft.task_key}", actor, operation)

    def remove_cost(self, purchase_id: str, stage_key: str, cost_id: str, actor: str) -> Workflow:
        return self._mutate(
            purchase_id,
            f"remove cost {cost_id} from {stage_key}",
            actor,
            lambda wf: mutations.remove_workflow_cost(wf, stage_key, cost_id, catalog=self.catalog),
        )

    def finalize(self, purchase_id: str, actor: str) -> Workflow:
        return self._mutate(purchase_id, "finalize", actor, lambda wf: finalize(wf, actor))

    def upload_attachment(self, upload: Upload, actor: str) -> Attachment:
        try:
            attachment = self.attachments.store(upload, uploaded_by=actor)
        except WorkflowError as e:
            logger.warning(f"Attachment rejected: file={upload.filename}, actor={actor}, reason={e}")
            raise
        logger.info(f"Attachment stored: id={attachment.id}, kind={attachment.kind.value}, actor={actor}")
        return attachment

    def _resolve_cost(self, draft: CostDraft | None, attachment_id: str | None) -> CostDraft | None:
        """Swap the draft's attachment for the stored record with the same id."""
        if draft is None:
            return None
        if attachment_id is None and draft.attachment is not None:
            attachment_id = draft.attachment.id
        attachment = self.attachments.require(attachment_id) if attachment_id is not None else None
        return draft.model_copy(update={"attachment": attachment})

    def _mutate(
        self,
        purchase_id: str,
        action: str,
        actor: str,
        operation: Callable[[Workflow], Workflow],
    ) -> Workflow:
        workflow = self.store.load(purchase_id)
        try:
            updated = operation(workflow)
        except WorkflowError as e:
            logger.warning(f"Rejected '{action}' on purchase {purchase_id} by {actor}: {e}")
            raise
        if updated is workflow:
            logger.info(f"No change for '{action}' on purchase {purchase_id} by {actor}")
            return workflow
        saved = self.store.save(updated)
        logger.info(f"Applied '{action}' on purchase {purchase_id} by {actor} (version {saved.version})")
        return saved
