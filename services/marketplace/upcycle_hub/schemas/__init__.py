# Package exports - these allow cleaner imports like:
# from upcycle_hub.schemas import ProductCreate, ProductResponse
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest, ProfileUpdate, UserResponse, AuthResponse, UserEnvelope
from upcycle_hub.schemas.product import (
    ProductCreate, ProductResponse, ProductEnvelope, ProductListResponse, SellerProductsResponse,
    ProductImageCreate, ProductImageResponse, ProductImageEnvelope,
)
from upcycle_hub.schemas.conversation import (
    ConversationCreate, ConversationResponse, ConversationListResponse,
    MessageCreate, MessageResponse, MessageListResponse,
)
