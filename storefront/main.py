from __future__ import annotations
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .catalog import CatalogClient
from .config import Settings, settings as default_settings, setup_logging
from .database import KeyValueStorage, get_storage
from .discovery import categories_of, discover
from .errors import ProductNotFound, SelectionRequired
from .schemas import (
    CATEGORIES,
    AddToCartIn,
    CartState,
    FilterOut,
    FilterState,
    FilterUpdate,
    MembershipOut,
    Product,
    ProductPage,
    QuantityIn,
    SortKey,
    WishlistState,
)
from .session import CatalogSource, StorefrontSession

router = APIRouter()

def get_session(request: Request) -> StorefrontSession:
    return request.app.state.session

def filter_out(session: StorefrontSession) -> FilterOut:
    filters = session.filters
    return FilterOut(
        applied=filters.state,
        search_input=filters.search.latest,
        price_input=filters.price_range.latest,
        pending=filters.pending,
    )

@router.get("/")
async def root():
    return {"message": "Storefront Backend Running"}

@router.get("/categories")
async def list_categories(session: StorefrontSession = Depends(get_session)):
    products = await session.ensure_catalog()
    return {"categories": CATEGORIES, "available": categories_of(products)}

# Products

@router.get("/products", response_model=ProductPage)
async def list_products(
    q: str = Query(""),
    min_price: float = Query(0, ge=0),
    max_price: float = Query(1000, ge=0),
    category: Optional[List[str]] = Query(None),
    sort: SortKey = Query(SortKey.FEATURED),
    page: int = Query(1, ge=1),
    session: StorefrontSession = Depends(get_session),
):
    if min_price > max_price:
        raise HTTPException(status_code=400, detail="min_price must not exceed max_price")
    filters = FilterState(
        search=q,
        price_range=(min_price, max_price),
        categories=category or [],
        sort=sort,
        page=page,
    )
    products = await session.ensure_catalog()
    return discover(products, filters, session.page_size)

@router.get("/products/best-sellers", response_model=list[Product])
async def best_sellers(count: int = Query(4, ge=1), session: StorefrontSession = Depends(get_session)):
    return await session.catalog.get_best_sellers(count)

@router.get("/products/new-arrivals", response_model=list[Product])
async def new_arrivals(count: int = Query(4, ge=1), session: StorefrontSession = Depends(get_session)):
    return await session.catalog.get_new_arrivals(count)

@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: str, session: StorefrontSession = Depends(get_session)):
    try:
        return await session.find_product(product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("/products/{product_id}/recommended", response_model=list[Product])
async def recommended(
    product_id: str,
    count: int = Query(4, ge=1),
    session: StorefrontSession = Depends(get_session),
):
    return await session.catalog.get_recommended(product_id, count)

# Session filters

@router.get("/browse", response_model=ProductPage)
async def browse(session: StorefrontSession = Depends(get_session)):
    await session.ensure_catalog()
    return session.browse()

@router.get("/filters", response_model=FilterOut)
async def get_filters(session: StorefrontSession = Depends(get_session)):
    return filter_out(session)

@router.put("/filters", response_model=FilterOut)
async def update_filters(payload: FilterUpdate, session: StorefrontSession = Depends(get_session)):
    filters = session.filters
    try:
        if payload.search is not None:
            filters.set_search(payload.search)
        if payload.price_range is not None:
            filters.set_price_range(*payload.price_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if payload.sort is not None:
        filters.set_sort(payload.sort)
    if payload.page is not None:
        filters.set_page(payload.page)
    if payload.view is not None:
        filters.set_view(payload.view)
    return filter_out(session)

@router.post("/filters/categories/{category}", response_model=FilterOut)
async def toggle_category(category: str, session: StorefrontSession = Depends(get_session)):
    session.filters.toggle_category(category)
    return filter_out(session)

@router.post("/filters/reset", response_model=FilterOut)
async def reset_filters(session: StorefrontSession = Depends(get_session)):
    session.filters.reset()
    return filter_out(session)

# Cart

@router.get("/cart", response_model=CartState)
async def get_cart(session: StorefrontSession = Depends(get_session)):
    return session.cart.to_state()

@router.post("/cart/items", response_model=CartState)
async def add_cart_item(payload: AddToCartIn, session: StorefrontSession = Depends(get_session)):
    try:
        await session.add_to_cart(payload.product_id, payload.quantity, payload.color, payload.size)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SelectionRequired as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.cart.to_state()

@router.patch("/cart/items/{product_id}", response_model=CartState)
async def set_cart_quantity(product_id: str, payload: QuantityIn, session: StorefrontSession = Depends(get_session)):
    session.cart.set_quantity(product_id, payload.quantity)
    return session.cart.to_state()

@router.delete("/cart/items/{product_id}", response_model=CartState)
async def remove_cart_item(product_id: str, session: StorefrontSession = Depends(get_session)):
    session.cart.remove_item(product_id)
    return session.cart.to_state()

@router.delete("/cart", response_model=CartState)
async def clear_cart(session: StorefrontSession = Depends(get_session)):
    session.cart.clear()
    return session.cart.to_state()

@router.post("/cart/toggle", response_model=CartState)
async def toggle_cart(session: StorefrontSession = Depends(get_session)):
    session.cart.toggle_open()
    return session.cart.to_state()

# Wishlist

@router.get("/wishlist", response_model=WishlistState)
async def get_wishlist(session: StorefrontSession = Depends(get_session)):
    return session.wishlist.to_state()

@router.get("/wishlist/{product_id}", response_model=MembershipOut)
async def wishlist_membership(product_id: str, session: StorefrontSession = Depends(get_session)):
    return MembershipOut(product_id=product_id, liked=session.wishlist.contains(product_id))

@router.post("/wishlist/{product_id}", response_model=WishlistState)
async def add_to_wishlist(product_id: str, session: StorefrontSession = Depends(get_session)):
    try:
        product = await session.find_product(product_id)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    session.wishlist.add(product)
    return session.wishlist.to_state()

@router.delete("/wishlist/{product_id}", response_model=WishlistState)
async def remove_from_wishlist(product_id: str, session: StorefrontSession = Depends(get_session)):
    session.wishlist.remove(product_id)
    return session.wishlist.to_state()

@router.delete("/wishlist", response_model=WishlistState)
async def clear_wishlist(session: StorefrontSession = Depends(get_session)):
    session.wishlist.clear()
    return session.wishlist.to_state()

def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    catalog: Optional[CatalogSource] = None,
) -> FastAPI:
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(cfg.LOG_LEVEL)
        source = catalog or CatalogClient(cfg=cfg)
        session = StorefrontSession(storage or get_storage(cfg), source, cfg)
        app.state.session = session
        try:
            yield
        finally:
            session.close()
            if catalog is None:
                await source.aclose()

    app = FastAPI(title="Storefront API", lifespan=lifespan)

    # Allow all origins for dev preview
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app

app = create_app()

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
