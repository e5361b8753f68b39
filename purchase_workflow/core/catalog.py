"""Stage catalog shipped with the engine.

Transport is the reference stage: a yard must be selected, then transport is
arranged, the yard notified and photos requested, strictly in that order.
"""
from enum import Enum

from purchase_workflow.core.schema import FieldPrecondition, StageCatalog, StageSchema, TaskSpec


class StageKey(str, Enum):
    TRANSPORT = "transport"


class TaskKey(str, Enum):
    TRANSPORT_ARRANGED = "transport_arranged"
    YARD_NOTIFIED = "yard_notified"
    PHOTOS_REQUESTED = "photos_requested"


YARD_ID_FIELD = "yard_id"
YARD_NAME_FIELD = "yard_name"

TRANSPORT_STAGE = StageSchema(
    key=StageKey.TRANSPORT.value,
    label="Transport",
    fields=(YARD_ID_FIELD, YARD_NAME_FIELD),
    managed_fields=(YARD_ID_FIELD, YARD_NAME_FIELD),
    preconditions=(
        FieldPrecondition(field=YARD_ID_FIELD, message="Yard not selected"),
    ),
    tasks=(
        TaskSpec(
            key=TaskKey.TRANSPORT_ARRANGED.value,
            label="Transport Arranged",
            description="Confirm that transport to the yard has been arranged",
            captures_cost=True,
        ),
        TaskSpec(
            key=TaskKey.YARD_NOTIFIED.value,
            label="Notify the Yard",
            description="Inform the yard that a vehicle is coming",
            depends_on=(TaskKey.TRANSPORT_ARRANGED.value,),
        ),
        TaskSpec(
            key=TaskKey.PHOTOS_REQUESTED.value,
            label="Photos Requested",
            description="Request photos of the vehicle from the yard",
            depends_on=(TaskKey.YARD_NOTIFIED.value,),
            captures_cost=True,
        ),
    ),
)

DEFAULT_CATALOG = StageCatalog(stages=(TRANSPORT_STAGE,))
