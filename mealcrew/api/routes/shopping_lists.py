from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.domain.Session import Session
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.infra.ShoppingList_Repository import ShoppingListRepository
from mealcrew.infra.pdf_utils import generate_pdf_for_shopping_list
from mealcrew.logic.shopping.list_builder import group_by_category

router = APIRouter(prefix='/api/shopping-lists')


def _plan_and_list(plan_id: str, user: Session):
    plan = PlanRepository().get_owned(plan_id, user.user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Plan not found')
    shopping_list = ShoppingListRepository().get_for_plan(plan.id)
    if shopping_list is None:
        raise HTTPException(status_code=404, detail='Shopping list not found - plan may not be finalized yet')
    return plan, shopping_list


@router.get('/{plan_id}')
def get_shopping_list(plan_id: str, user: Session = Depends(get_current_user)):
    _, shopping_list = _plan_and_list(plan_id, user)
    return success_response({
        'shopping_list': shopping_list.to_dict(),
        'items_by_category': group_by_category(shopping_list.items),
        'total_items': len(shopping_list.items),
    })


@router.get('/{plan_id}/pdf')
def export_shopping_list_pdf(plan_id: str, user: Session = Depends(get_current_user)):
    plan, shopping_list = _plan_and_list(plan_id, user)
    pdf_bytes = generate_pdf_for_shopping_list(plan, group_by_category(shopping_list.items),
                                               shopping_list.adult_equivalent)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=shopping_list_{plan.id}.pdf"},
    )
