# Package exports - these allow cleaner imports like:
# from upcycle_hub.models import Product, User
# Used by alembic/env.py for migration autogenerate
from upcycle_hub.models.user import User
from upcycle_hub.models.product import Product, ProductImage
from upcycle_hub.models.conversation import Conversation, Message
