from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

from app.features.mailing_list.schemas.mailing_list import SubscribeIn, SubscribeResponse, SubscriberOut
from app.features.mailing_list.services.mailing_list import MailingList
from app.features.mailing_list.utils.emailer import send_welcome_email
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(tags=["Mailing list"])


def get_mailing_list(request: Request) -> MailingList:
    return request.app.state.mailing_list


@router.post("/subscribe", response_model=SubscribeResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    subscribe_in: SubscribeIn,
    background_tasks: BackgroundTasks,
    mailing_list: MailingList = Depends(get_mailing_list),
):
    subscriber = mailing_list.subscribe(subscribe_in.email, subscribe_in.name)
    background_tasks.add_task(send_welcome_email, subscriber.email, subscriber.name)
    logger.info(f"New mailing list subscriber ({len(mailing_list)} total)")

    return api_response(
        data=SubscriberOut.model_validate(subscriber),
        message="Successfully subscribed",
        status_code=status.HTTP_201_CREATED,
    )
