from enum import Enum


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETED = "COMPLETED"


class OrderType(str, Enum):
    DINE_IN = "DINE_IN"
    TAKEAWAY = "TAKEAWAY"


class TableStatus(str, Enum):
    FREE = "FREE"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Kitchen workflow: each status may only advance to the next one.
ORDER_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.IN_PROGRESS},
    OrderStatus.IN_PROGRESS: {OrderStatus.READY},
    OrderStatus.READY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
}


class Messages:
    AUTH_REQUIRED = "Authentication required"
    USER_NOT_FOUND = "User not found"
    INVALID_CREDENTIALS = "Invalid email or password"
    USER_ALREADY_EXISTS = "User already exists"
    BRANCH_NOT_FOUND = "Branch not found"
    TERMINAL_NOT_FOUND = "Terminal not found"
    SESSION_NOT_FOUND = "Session not found"
    SESSION_ALREADY_OPEN = "Terminal already has an active session"
    SESSION_ALREADY_CLOSED = "Session is already closed"
    FLOOR_NOT_FOUND = "Floor not found"
    TABLE_NOT_FOUND = "Table not found"
    TABLE_OCCUPIED = "Table is already occupied"
    TABLE_ID_REQUIRED = "Table ID is required for dine-in orders"
    CATEGORY_NOT_FOUND = "Category not found"
    CATEGORY_EXISTS = "Category name already exists in this branch"
    PRODUCT_NOT_FOUND = "Product not found"
    CUSTOMER_NOT_FOUND = "Customer not found"
    CUSTOMER_EXISTS = "Email or phone already exists"
    ORDER_NOT_FOUND = "Order not found"
    ORDER_COMPLETED = "Order is already paid/completed"
    ORDER_EMPTY = "Cannot send empty order to kitchen"
    ITEMS_REQUIRED = "Items array is required"
    INVALID_STATUS_TRANSITION = "Invalid status transition"
