from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from sqlalchemy import case, func

from simple_ledger.accounting_db import db
from simple_ledger.errors import NotFoundError, product_not_found
from simple_ledger.models.entity import Entity
from simple_ledger.models.product import Product
from simple_ledger.models.transaction import Transaction
from simple_ledger.utils.money import money
import simple_ledger.common as common


@dataclass
class ProductDetail:
    product: Product
    total_sales: float = 0.0
    total_purchases: float = 0.0
    customers: List[str] = field(default_factory=list)
    vendors: List[str] = field(default_factory=list)


def get_products(user_id):
    return (
        db.session.query(Product)
        .filter(Product.user_id == user_id)
        .order_by(func.lower(Product.name), Product.name, Product.id)
        .all()
    )


def get_product(user_id, product_id):
    return (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.user_id == user_id)
        .one_or_none()
    )


def delete_product(user_id, product_id) -> None:
    """Remove a product from the catalog; its transactions are kept."""
    product = get_product(user_id, product_id)
    if not product:
        raise NotFoundError(product_not_found(product_id))

    db.session.delete(product)
    db.session.commit()
    common.logger.info(f"Product {product_id} ({product.name!r}) deleted by user {user_id}")


def get_product_detail(user_id, product_id) -> ProductDetail:
    """
    Sales/purchase totals for a product and the distinct customers and
    vendors that traded it, in first-traded order.
    """
    product = get_product(user_id, product_id)
    if not product:
        raise NotFoundError(product_not_found(product_id))

    sales_sum = func.sum(
        case((Transaction.type == "sale", Transaction.value), else_=0)
    ).label("total_sales")

    purchases_sum = func.sum(
        case((Transaction.type == "purchase", Transaction.value), else_=0)
    ).label("total_purchases")

    totals = (
        db.session.query(sales_sum, purchases_sum)
        .filter(Transaction.user_id == user_id)
        .filter(Transaction.product_id == product.id)
        .one()
    )

    partners = (
        db.session.query(Entity.name, Entity.type)
        .select_from(Transaction)
        .join(Entity, Transaction.entity_id == Entity.id)
        .filter(Transaction.user_id == user_id)
        .filter(Transaction.product_id == product.id)
        .order_by(Transaction.date, Transaction.id)
        .all()
    )

    detail = ProductDetail(
        product=product,
        total_sales=money(totals.total_sales),
        total_purchases=money(totals.total_purchases),
    )
    for name, entity_type in partners:
        names = detail.customers if entity_type == "customer" else detail.vendors
        if name not in names:
            names.append(name)
    return detail
