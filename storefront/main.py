import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from . import checkout, crud, schemas
from .config import load_settings, set_settings
from .context import AppContext, create_context
from .errors import AuthRequired

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="3D Store")

SAVE_FAILED = "Error saving product. Please try again."

_context: Optional[AppContext] = None


# Dependency providing the single application context for this run

def get_context() -> AppContext:
    global _context
    if _context is None:
        settings = load_settings()
        set_settings(settings)
        _context = create_context(settings)
    return _context


def require_user(ctx: AppContext = Depends(get_context)) -> schemas.SessionUser:
    if not ctx.auth.is_authenticated:
        raise HTTPException(status_code=401, detail="login required")
    return ctx.auth.current_user


def require_admin(ctx: AppContext = Depends(get_context)) -> AppContext:
    if not ctx.auth.is_admin():
        raise HTTPException(status_code=403, detail="Access Denied")
    return ctx


@app.get("/health")
async def health(ctx: AppContext = Depends(get_context)):
    return {"status": "ok", "store_ready": ctx.store.ready}

# -------------------- Catalog --------------------

@app.get("/products", response_model=List[schemas.ProductRead])
async def get_products(q: str = Query("", max_length=100), sort: Optional[str] = Query(None), ctx: AppContext = Depends(get_context)):
    # filtering happens after loading the full catalog
    return crud.filter_products(crud.list_products(ctx.store), q=q, sort=sort)


@app.get("/products/{product_id}", response_model=schemas.ProductRead)
async def get_product(product_id: int, ctx: AppContext = Depends(get_context)):
    product = crud.get_product(ctx.store, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="product not found")
    return product


@app.get("/products/{product_id}/checkout", response_model=schemas.CheckoutLink)
async def get_checkout_link(product_id: int, ctx: AppContext = Depends(get_context)):
    product = crud.get_product(ctx.store, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="product not found")
    email = ctx.auth.current_user.email if ctx.auth.is_authenticated else None
    url = checkout.build_checkout_url(product, ctx.settings.public_base_url, email=email)
    if not url:
        raise HTTPException(status_code=400, detail="Payment link not available for this product")
    return schemas.CheckoutLink(product_id=product.id, url=url)


@app.get("/thankyou", response_model=schemas.ThankYou)
async def get_thank_you(product_id: Optional[int] = None, email: Optional[str] = None, ctx: AppContext = Depends(get_context)):
    return checkout.thank_you(ctx.store, product_id=product_id, email=email)

# -------------------- Auth --------------------

@app.post("/auth/register", response_model=schemas.SessionUser, status_code=201)
async def auth_register(payload: schemas.Credentials, ctx: AppContext = Depends(get_context)):
    result = ctx.auth.register(payload.email, payload.password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return result.user


@app.post("/auth/login", response_model=schemas.SessionUser)
async def auth_login(payload: schemas.Credentials, ctx: AppContext = Depends(get_context)):
    result = ctx.auth.login(payload.email, payload.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)
    return result.user


@app.post("/auth/logout")
async def auth_logout(ctx: AppContext = Depends(get_context)):
    ctx.auth.logout()
    return {"authenticated": False}


@app.get("/auth/me")
async def auth_me(ctx: AppContext = Depends(get_context)):
    return {
        "authenticated": ctx.auth.is_authenticated,
        "is_admin": ctx.auth.is_admin(),
        "user": ctx.auth.current_user,
    }

# -------------------- Dashboard --------------------

@app.get("/orders", response_model=List[schemas.OrderRead])
async def get_my_orders(user: schemas.SessionUser = Depends(require_user), ctx: AppContext = Depends(get_context)):
    return crud.list_user_orders(ctx.store, user.email)

# -------------------- Admin --------------------

@app.get("/admin/products", response_model=List[schemas.ProductRead])
async def admin_list_products(ctx: AppContext = Depends(require_admin)):
    return crud.list_products(ctx.store)


@app.post("/admin/products", response_model=schemas.ProductRead, status_code=201)
async def admin_create_product(product: schemas.ProductCreate, ctx: AppContext = Depends(require_admin)):
    created = crud.create_product(ctx.store, product)
    if not created:
        raise HTTPException(status_code=400, detail=SAVE_FAILED)
    return created


@app.put("/admin/products/{product_id}", response_model=schemas.ProductRead)
async def admin_update_product(product_id: int, product: schemas.ProductCreate, ctx: AppContext = Depends(require_admin)):
    updated = crud.update_product(ctx.store, product_id, product)
    if not updated:
        raise HTTPException(status_code=400, detail=SAVE_FAILED)
    return updated


@app.delete("/admin/products/{product_id}")
async def admin_delete_product(product_id: int, ctx: AppContext = Depends(require_admin)):
    if not crud.delete_product(ctx.store, product_id):
        raise HTTPException(status_code=400, detail="Error deleting product. Please try again.")
    return {"deleted": product_id}


@app.post("/admin/orders", response_model=schemas.OrderRead, status_code=201)
async def admin_record_order(order: schemas.OrderCreate, ctx: AppContext = Depends(require_admin)):
    created = crud.record_order(ctx.store, order)
    if not created:
        raise HTTPException(status_code=400, detail="Error recording order. Please try again.")
    return created

# -------------------- Chat --------------------

@app.post("/chat", response_model=schemas.ChatTranscript)
async def chat_send(payload: schemas.ChatRequest, ctx: AppContext = Depends(get_context)):
    try:
        return ctx.chat.send(payload.message, chat_id=payload.chat_id)
    except AuthRequired as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/chat")
async def chat_history(ctx: AppContext = Depends(get_context)):
    return {
        "current_chat_id": ctx.chat.current_chat_id,
        "prompts_left": ctx.chat.prompts_left(),
        "chats": ctx.chat.list_chats(),
    }


@app.post("/chat/new", response_model=schemas.ChatTranscript)
async def chat_new(ctx: AppContext = Depends(get_context)):
    return ctx.chat.new_chat()


@app.get("/chat/{chat_id}", response_model=schemas.ChatTranscript)
async def chat_switch(chat_id: int, ctx: AppContext = Depends(get_context)):
    return ctx.chat.switch_chat(chat_id)


@app.delete("/chat/{chat_id}")
async def chat_delete(chat_id: int, ctx: AppContext = Depends(get_context)):
    if not ctx.chat.delete_chat(chat_id):
        raise HTTPException(status_code=404, detail="chat not found")
    return {"deleted": chat_id}
