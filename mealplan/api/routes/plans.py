import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from mealplan.api.deps import get_engine
from mealplan.domain.FilterState import FilterState, SlotFilter
from mealplan.infra.pdf_utils import generate_pdf_for_plan
from mealplan.logic.planning.filenames import format_label, is_plan_filename
from mealplan.logic.sync.engine import PlanSyncEngine
from mealplan.utilities.validators import AutoFillInput, SelectPlanInput, SlotUpdateInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def _plan_payload(filename, plan, **extra):
    payload = {
        "filename": filename,
        "label": format_label(filename),
        "days": list(plan.days),
        "meals": list(plan.meals),
        "plan": plan.to_dict(),
    }
    payload.update(extra)
    return payload


def _require_plan_filename(filename: str):
    if not is_plan_filename(filename):
        raise HTTPException(status_code=400, detail=f"Not a plan filename: {filename}")


# === Active plan ===
@router.get("/plan")
def get_active_plan(engine: PlanSyncEngine = Depends(get_engine)):
    """Return the plan being edited with its file and save state."""
    plan = engine.get_active_plan()
    return _plan_payload(engine.active_filename, plan, state=engine.state.value, dirty=engine.is_dirty())


@router.put("/plan/slot")
def update_slot(body: SlotUpdateInput, engine: PlanSyncEngine = Depends(get_engine)):
    try:
        changed = engine.mutate_slot(body.day, body.meal, body.recipe)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"changed": changed, "filename": engine.active_filename}


@router.post("/plan/flush")
def flush_plan(engine: PlanSyncEngine = Depends(get_engine)):
    if not engine.flush():
        raise HTTPException(status_code=503, detail="Plan could not be saved; edits are kept in memory")
    return {"saved": True, "filename": engine.active_filename}


@router.post("/plan/autofill")
def autofill_plan(body: AutoFillInput, engine: PlanSyncEngine = Depends(get_engine)):
    filters = FilterState()
    for f in body.filters:
        if f.meal not in engine.meals:
            raise HTTPException(status_code=400, detail=f"Unknown meal slot: {f.meal}")
        filters.set(f.day, f.meal, SlotFilter(f.season, f.sections, f.tags, f.search))
    filled = engine.run_auto_fill(filters)
    return _plan_payload(engine.active_filename, engine.get_active_plan(), filled=filled)


# === Plan files ===
@router.get("/plans")
def list_plans(engine: PlanSyncEngine = Depends(get_engine)):
    """All plan files, newest first."""
    active = engine.active_filename
    files = engine.list_plan_files()
    return {
        "active": active,
        "files": [{"filename": f, "label": format_label(f), "active": f == active} for f in files],
    }


@router.post("/plans", status_code=201)
def create_plan(engine: PlanSyncEngine = Depends(get_engine)):
    filename = engine.create_new_plan()
    if filename is None:
        raise HTTPException(status_code=503, detail="New plan could not be created")
    return {"filename": filename, "label": format_label(filename)}


@router.post("/plans/select")
def select_plan(body: SelectPlanInput, engine: PlanSyncEngine = Depends(get_engine)):
    if not engine.select_plan_file(body.filename):
        if body.filename not in engine.list_plan_files():
            raise HTTPException(status_code=404, detail=f"Plan not found: {body.filename}")
        raise HTTPException(status_code=503, detail="Current plan could not be saved; switch aborted")
    return _plan_payload(engine.active_filename, engine.get_active_plan())


@router.get("/plans/{filename}")
def view_plan(filename: str, engine: PlanSyncEngine = Depends(get_engine)):
    """Read-only view of any plan file."""
    _require_plan_filename(filename)
    plan = engine.view_plan_file(filename)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Plan not found: {filename}")
    return _plan_payload(filename, plan, readonly=filename != engine.active_filename)


@router.get("/plans/{filename}/pdf")
def plan_pdf(filename: str, engine: PlanSyncEngine = Depends(get_engine)):
    _require_plan_filename(filename)
    plan = engine.view_plan_file(filename)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Plan not found: {filename}")
    pdf = generate_pdf_for_plan(plan, format_label(filename))
    stem = filename.rsplit(".", 1)[0]
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{stem}.pdf"'},
    )


@router.delete("/plans/{filename}")
def delete_plan(filename: str, confirm: bool = Query(default=False), engine: PlanSyncEngine = Depends(get_engine)):
    _require_plan_filename(filename)
    if not confirm:
        raise HTTPException(status_code=400, detail="Deletion must be confirmed with confirm=true")
    existed = filename in engine.list_plan_files()
    if not engine.delete_plan_file(filename, confirm=True):
        if not existed:
            raise HTTPException(status_code=404, detail=f"Plan not found: {filename}")
        raise HTTPException(status_code=503, detail=f"Plan could not be deleted: {filename}")
    logger.info("Plan %s deleted via API", filename)
    return {"deleted": filename, "active": engine.active_filename}
