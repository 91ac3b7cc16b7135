"""Row-to-JSON shaping shared by the routers.

Nested objects are only included when the caller asks for them so list
endpoints stay flat and cheap.
"""

from cafe_pos.common import iso, money, table_sort_key
from cafe_pos.models import (
    Branch,
    Category,
    Customer,
    DiningTable,
    Floor,
    Order,
    OrderItem,
    Payment,
    PaymentSettings,
    PosSession,
    PosTerminal,
    Product,
    User,
)


def branch_out(branch: Branch) -> dict:
    return {
        "id": branch.id,
        "name": branch.name,
        "address": branch.address,
        "created_at": iso(branch.created_at),
    }


def user_out(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "created_at": iso(user.created_at),
    }


def floor_out(floor: Floor, with_tables: bool = False) -> dict:
    data = {"id": floor.id, "branch_id": floor.branch_id, "name": floor.name}
    if with_tables:
        tables = sorted(floor.tables, key=lambda table: table_sort_key(table.table_number))
        data["tables"] = [table_out(table, with_floor=False) for table in tables]
    return data


def table_out(table: DiningTable, with_floor: bool = True) -> dict:
    data = {
        "id": table.id,
        "table_number": table.table_number,
        "seats": table.seats,
        "status": table.status,
        "floor_id": table.floor_id,
    }
    if with_floor and table.floor is not None:
        data["floor"] = floor_out(table.floor)
    return data


def terminal_out(terminal: PosTerminal, with_latest_session: bool = False) -> dict:
    data = {
        "id": terminal.id,
        "terminal_name": terminal.terminal_name,
        "branch_id": terminal.branch_id,
        "user_id": terminal.user_id,
        "created_at": iso(terminal.created_at),
        "branch": branch_out(terminal.branch) if terminal.branch else None,
        "user": user_out(terminal.user) if terminal.user else None,
    }
    if with_latest_session:
        latest = terminal.sessions[0] if terminal.sessions else None
        data["latest_session"] = session_out(latest) if latest else None
    return data


def session_out(session: PosSession, with_orders: bool = False) -> dict:
    data = {
        "id": session.id,
        "terminal_id": session.terminal_id,
        "opened_at": iso(session.opened_at),
        "closed_at": iso(session.closed_at),
        "total_sales": money(session.total_sales),
        "is_open": session.closed_at is None,
    }
    if with_orders:
        data["orders"] = [order_out(order) for order in session.orders]
    return data


def category_out(category: Category) -> dict:
    return {"id": category.id, "branch_id": category.branch_id, "name": category.name}


def product_out(product: Product) -> dict:
    return {
        "id": product.id,
        "branch_id": product.branch_id,
        "category_id": product.category_id,
        "name": product.name,
        "price": money(product.price),
        "is_active": product.is_active,
        "category": category_out(product.category) if product.category else None,
    }


def customer_out(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "total_sales": money(customer.total_sales),
        "created_at": iso(customer.created_at),
    }


def order_item_out(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product.name if item.product else None,
        "quantity": item.quantity,
        "price_at_time": money(item.price_at_time),
        "line_total": money(item.price_at_time * item.quantity),
    }


def order_out(order: Order) -> dict:
    return {
        "id": order.id,
        "branch_id": order.branch_id,
        "session_id": order.session_id,
        "table_id": order.table_id,
        "customer_id": order.customer_id,
        "order_type": order.order_type,
        "status": order.status,
        "total_amount": money(order.total_amount),
        "created_by": order.created_by,
        "created_at": iso(order.created_at),
        "table": table_out(order.table, with_floor=False) if order.table else None,
        "items": [order_item_out(item) for item in order.items],
    }


def payment_out(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "order_id": payment.order_id,
        "amount": money(payment.amount),
        "method": payment.method,
        "status": payment.status,
        "transaction_reference": payment.transaction_reference,
        "created_at": iso(payment.created_at),
    }


def payment_settings_out(settings: PaymentSettings) -> dict:
    return {
        "terminal_id": settings.terminal_id,
        "use_cash": settings.use_cash,
        "use_digital": settings.use_digital,
        "use_upi": settings.use_upi,
        "upi_id": settings.upi_id,
        "upi_name": settings.upi_name,
        "merchant_code": settings.merchant_code,
    }
