# models_bootstrap.py
from organization import models as _org_models
from member import models as _member_models
from orgrole import models as _orgrole_models
from shift import models as _shift_models
from swaplog import models as _swaplog_models
from notification import models as _notification_models
