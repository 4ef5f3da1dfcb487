"""
backend/routes_additional_services.py

Additional services:
- /api/other-customers      walk-in customers (OSC0001 ids)
- /api/passport-services    passport applications and renewals
- /api/manpower-service     recruitment / manpower processing
- /api/visa-processing      visa applications
- /api/other-services       anything else the counter sells

The four service collections share validation and money handling, so
their routers are built by one factory. dueAmount is always
totalAmount - paidAmount.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

try:
    from backend.auth_context import AuthContext, require_auth_context
    from backend.branch import branch_scope, require_document, stamp_owner
    from backend.config import IS_DEV
    from backend.db import get_db
    from backend.dependencies import ListParams, require_permission
    from backend.documents import (
        all_documents,
        delete_document,
        find_documents,
        find_one,
        insert_document,
        pagination,
        update_document,
    )
    from backend.schemas_common import DeleteResponse
    from backend.schemas_services import (
        CustomerListResponse,
        CustomerResponse,
        CustomerWriteRequest,
        ServiceListResponse,
        ServiceResponse,
        ServiceWriteRequest,
    )
except ModuleNotFoundError:
    from auth_context import AuthContext, require_auth_context
    from branch import branch_scope, require_document, stamp_owner
    from config import IS_DEV
    from db import get_db
    from dependencies import ListParams, require_permission
    from documents import (
        all_documents,
        delete_document,
        find_documents,
        find_one,
        insert_document,
        pagination,
        update_document,
    )
    from schemas_common import DeleteResponse
    from schemas_services import (
        CustomerListResponse,
        CustomerResponse,
        CustomerWriteRequest,
        ServiceListResponse,
        ServiceResponse,
        ServiceWriteRequest,
    )

from domains.erp.calculations import due_amount, first_number, to_number
from domains.erp.rules import is_blank, is_valid_email, next_sequence_id

CUSTOMERS = "service_customers"
CUSTOMER_SEARCH_FIELDS = ("name", "mobile", "email", "customerId", "passportNumber")
SERVICE_SEARCH_FIELDS = ("clientName", "phone", "email", "passportNumber", "serviceType", "country")


def _db_error(op: str, e: sqlite3.Error) -> HTTPException:
    if IS_DEV:
        print(f"[SERVICES] DB error on {op}: {e}")
    return HTTPException(status_code=500, detail="Database error")


# ---------------------------------------------------------
# Other customers
# ---------------------------------------------------------
customers_router = APIRouter(
    prefix="/api/other-customers",
    tags=["additional-services"],
)


def _prepare_customer(data: Dict[str, Any]) -> Dict[str, Any]:
    if is_blank(data.get("name")):
        data["name"] = f"{data.get('firstName') or ''} {data.get('lastName') or ''}".strip() or None
    if is_blank(data.get("name")):
        raise HTTPException(status_code=400, detail="Name is required")
    if is_blank(data.get("mobile")):
        raise HTTPException(status_code=400, detail="Mobile number is required")
    if data.get("email") and not is_valid_email(data["email"]):
        raise HTTPException(status_code=400, detail="Invalid email format")
    data["status"] = data.get("status") or "active"
    return data


@customers_router.get("", response_model=CustomerListResponse, dependencies=[Depends(require_permission("customers", "view"))])
def list_customers(params: ListParams = Depends(), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        items, total = find_documents(
            conn,
            CUSTOMERS,
            search=params.q,
            search_fields=CUSTOMER_SEARCH_FIELDS,
            equals={"status": params.status},
            branch_id=branch_scope(ctx),
            page=params.page,
            limit=params.limit,
        )
        return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
    except sqlite3.Error as e:
        raise _db_error("list customers", e)
    finally:
        conn.close()


@customers_router.post("", status_code=201, response_model=CustomerResponse, dependencies=[Depends(require_permission("customers", "create"))])
def create_customer(request: CustomerWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
    data = _prepare_customer(request.dict())
    conn = get_db()
    try:
        if find_one(conn, CUSTOMERS, "mobile", data["mobile"]):
            raise HTTPException(status_code=400, detail="Customer with this mobile number already exists")
        if is_blank(data.get("customerId")):
            existing = [c.get("customerId") for c in all_documents(conn, CUSTOMERS)]
            data["customerId"] = next_sequence_id(existing, "OSC", 4)
        elif find_one(conn, CUSTOMERS, "customerId", data["customerId"]):
            raise HTTPException(status_code=400, detail=f"Customer ID {data['customerId']} already exists")
        record = insert_document(conn, CUSTOMERS, stamp_owner(data, ctx))
        if IS_DEV:
            print(f"[SERVICES] Created customer id={record['id']} customerId={record['customerId']}")
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("create customer", e)
    finally:
        conn.close()


@customers_router.get("/{customer_id}", response_model=CustomerResponse, dependencies=[Depends(require_permission("customers", "view"))])
def get_customer(customer_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        return {"success": True, "data": require_document(conn, CUSTOMERS, customer_id, ctx, "Customer not found")}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("get customer", e)
    finally:
        conn.close()


@customers_router.put("/{customer_id}", response_model=CustomerResponse, dependencies=[Depends(require_permission("customers", "edit"))])
def update_customer(
    request: CustomerWriteRequest,
    customer_id: int = Path(..., ge=1),
    ctx: AuthContext = Depends(require_auth_context),
):
    changes = request.dict(exclude_unset=True)
    changes.pop("customerId", None)
    conn = get_db()
    try:
        current = require_document(conn, CUSTOMERS, customer_id, ctx, "Customer not found")
        merged = _prepare_customer({**current, **changes})
        if find_one(conn, CUSTOMERS, "mobile", merged["mobile"], exclude_id=customer_id):
            raise HTTPException(status_code=400, detail="Customer with this mobile number already exists")
        record = update_document(conn, CUSTOMERS, customer_id, merged, branch_scope(ctx))
        return {"success": True, "data": record}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("update customer", e)
    finally:
        conn.close()


@customers_router.delete("/{customer_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
def delete_customer(customer_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
    conn = get_db()
    try:
        if not delete_document(conn, CUSTOMERS, customer_id, branch_scope(ctx)):
            raise HTTPException(status_code=404, detail="Customer not found")
        return {"success": True, "message": "Customer deleted successfully"}
    except HTTPException:
        raise
    except sqlite3.Error as e:
        raise _db_error("delete customer", e)
    finally:
        conn.close()


# ---------------------------------------------------------
# Service records
# ---------------------------------------------------------
def prepare_service(data: Dict[str, Any], default_type: str) -> Dict[str, Any]:
    """Validate a service record and derive its money fields."""
    if is_blank(data.get("clientName")):
        raise HTTPException(status_code=400, detail="Client name is required")
    if is_blank(data.get("phone")):
        raise HTTPException(status_code=400, detail="Phone number is required")
    if is_blank(data.get("date")):
        raise HTTPException(status_code=400, detail="Date is required")
    if data.get("email") and not is_valid_email(data["email"]):
        raise HTTPException(status_code=400, detail="Invalid email format")

    total = first_number(data, "totalAmount", "totalBill")
    paid = to_number(data.get("paidAmount"))
    data["totalAmount"] = total
    data["totalBill"] = total
    data["paidAmount"] = paid
    data["dueAmount"] = due_amount(total, paid)
    data["serviceType"] = data.get("serviceType") or default_type
    data["status"] = data.get("status") or "pending"
    return data


def _service_router(prefix: str, collection: str, label: str, default_type: str) -> APIRouter:
    """CRUD router for one service collection."""
    service_router = APIRouter(prefix=prefix, tags=["additional-services"])
    not_found = f"{label} not found"

    @service_router.get("", response_model=ServiceListResponse, dependencies=[Depends(require_permission("customers", "view"))])
    def list_services(
        params: ListParams = Depends(),
        service_type: Optional[str] = Query(None, alias="serviceType", max_length=100),
        ctx: AuthContext = Depends(require_auth_context),
    ):
        conn = get_db()
        try:
            items, total = find_documents(
                conn,
                collection,
                search=params.q,
                search_fields=SERVICE_SEARCH_FIELDS,
                equals={"status": params.status, "serviceType": service_type},
                branch_id=branch_scope(ctx),
                page=params.page,
                limit=params.limit,
            )
            return {"success": True, "data": items, "pagination": pagination(params.page, params.limit, total)}
        except sqlite3.Error as e:
            raise _db_error(f"list {collection}", e)
        finally:
            conn.close()

    @service_router.post("", status_code=201, response_model=ServiceResponse, dependencies=[Depends(require_permission("customers", "create"))])
    def create_service(request: ServiceWriteRequest, ctx: AuthContext = Depends(require_auth_context)):
        data = stamp_owner(prepare_service(request.dict(), default_type), ctx)
        conn = get_db()
        try:
            record = insert_document(conn, collection, data)
            if IS_DEV:
                print(f"[SERVICES] Created {collection} id={record['id']} due={record['dueAmount']}")
            return {"success": True, "data": record}
        except sqlite3.Error as e:
            raise _db_error(f"create {collection}", e)
        finally:
            conn.close()

    @service_router.get("/{record_id}", response_model=ServiceResponse, dependencies=[Depends(require_permission("customers", "view"))])
    def get_service(record_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
        conn = get_db()
        try:
            return {"success": True, "data": require_document(conn, collection, record_id, ctx, not_found)}
        except HTTPException:
            raise
        except sqlite3.Error as e:
            raise _db_error(f"get {collection}", e)
        finally:
            conn.close()

    @service_router.put("/{record_id}", response_model=ServiceResponse, dependencies=[Depends(require_permission("customers", "edit"))])
    def update_service(
        request: ServiceWriteRequest,
        record_id: int = Path(..., ge=1),
        ctx: AuthContext = Depends(require_auth_context),
    ):
        changes = request.dict(exclude_unset=True)
        conn = get_db()
        try:
            current = require_document(conn, collection, record_id, ctx, not_found)
            if "totalAmount" in changes:
                changes.setdefault("totalBill", changes["totalAmount"])
            elif "totalBill" in changes:
                changes["totalAmount"] = changes["totalBill"]
            merged = prepare_service({**current, **changes}, default_type)
            record = update_document(conn, collection, record_id, merged, branch_scope(ctx))
            return {"success": True, "data": record}
        except HTTPException:
            raise
        except sqlite3.Error as e:
            raise _db_error(f"update {collection}", e)
        finally:
            conn.close()

    @service_router.delete("/{record_id}", response_model=DeleteResponse, dependencies=[Depends(require_permission("customers", "delete"))])
    def delete_service(record_id: int = Path(..., ge=1), ctx: AuthContext = Depends(require_auth_context)):
        conn = get_db()
        try:
            if not delete_document(conn, collection, record_id, branch_scope(ctx)):
                raise HTTPException(status_code=404, detail=not_found)
            return {"success": True, "message": f"{label} deleted successfully"}
        except HTTPException:
            raise
        except sqlite3.Error as e:
            raise _db_error(f"delete {collection}", e)
        finally:
            conn.close()

    return service_router


passport_router = _service_router("/api/passport-services", "passport_services", "Passport service", "new_passport")
manpower_router = _service_router("/api/manpower-service", "manpower_services", "Manpower service", "recruitment")
visa_router = _service_router("/api/visa-processing", "visa_services", "Visa processing service", "tourist")
other_services_router = _service_router("/api/other-services", "other_services", "Service", "other")

routers = (customers_router, passport_router, manpower_router, visa_router, other_services_router)
