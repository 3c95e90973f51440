from pydantic import BaseModel, ConfigDict, Field


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


# what the browser's PushSubscription.toJSON() sends
class PushSubscriptionCreate(BaseModel):
    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    model_config = ConfigDict(extra="ignore")


class PushSubscriptionPayload(BaseModel):
    subscription: PushSubscriptionCreate
    model_config = ConfigDict(extra="forbid")


class PushUnsubscribePayload(BaseModel):
    endpoint: str = Field(..., min_length=1)
    model_config = ConfigDict(extra="forbid")
