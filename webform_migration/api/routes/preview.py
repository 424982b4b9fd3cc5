"""Preview endpoints: assemble posted legacy rows without touching any target."""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from ..models import (
    FormPreviewRequest,
    FormPreviewResponse,
    LegacyComponentIn,
    ComponentPreviewResponse,
    ValidationIssueResponse,
)
from ...extractors.json_extractor import JSONExtractor
from ...models.legacy import LegacyFieldRecord
from ...models.errors import DecodeError
from ...services.assembler import FormAssembler
from ...services.field_mapper import FieldTypeMapper
from ...services.validator import FormValidator

logger = logging.getLogger(__name__)

router = APIRouter()


def build_dump(data: FormPreviewRequest) -> Dict[str, List[Dict[str, Any]]]:
    """Lay out a preview request as legacy table rows."""
    nid = data.form.nid
    cids = {component.form_key: component.cid for component in data.components}

    submitted_data = []
    for submission in data.submissions:
        for form_key, value in submission.data.items():
            if form_key not in cids:
                logger.debug(f"Submission {submission.sid}: no component '{form_key}', value ignored")
                continue
            submitted_data.append({"nid": nid, "sid": submission.sid, "cid": cids[form_key], "data": value})

    return {
        "node": [{"nid": nid, "title": data.form.title}],
        "webform": [data.form.model_dump()],
        "webform_component": [{**c.model_dump(), "nid": nid} for c in data.components],
        "webform_submissions": [
            {"nid": nid, **s.model_dump(exclude={"data"})} for s in data.submissions
        ],
        "webform_submitted_data": submitted_data,
    }


@router.post("/form", response_model=FormPreviewResponse)
async def preview_form(data: FormPreviewRequest):
    """Assemble a legacy form from posted rows."""
    extractor = JSONExtractor(build_dump(data))
    assembler = FormAssembler(extractor, mapper=FieldTypeMapper(token_rewrites=data.token_rewrites))

    form = extractor.list_forms(data.form.nid)[0]
    try:
        assembled = assembler.assemble(form, watermark=data.watermark, max_submissions=data.max_submissions)
    except DecodeError as e:
        raise HTTPException(status_code=422, detail=str(e))

    issues = FormValidator().validate(assembled)
    result = assembled.to_dict()

    return FormPreviewResponse(
        form_identifier=result["form_identifier"],
        title=result["title"],
        settings=result["settings"],
        elements=result["elements"],
        submissions=result["submissions"],
        notices=result["notices"],
        issues=[ValidationIssueResponse(**issue.to_dict()) for issue in issues],
        max_submission_id=assembled.max_submission_id,
    )


@router.post("/component", response_model=ComponentPreviewResponse)
async def preview_component(data: LegacyComponentIn):
    """Map a single legacy component."""
    record = LegacyFieldRecord.from_dict(data.model_dump())
    try:
        definition = FieldTypeMapper().map(record)
    except DecodeError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ComponentPreviewResponse(
        key=definition.key,
        target_type=definition.target_type,
        definition=definition.to_dict(),
        element=definition.to_elements(),
    )
