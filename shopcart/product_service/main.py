# shopcart/product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    1: {"id": 1, "name": "Keyboard", "price": 199.99, "stock": 10, "image_url": "/img/keyboard.png"},
    2: {"id": 2, "name": "Mouse", "price": 49.50, "stock": 25, "image_url": "/img/mouse.png"},
    3: {"id": 3, "name": "Monitor", "price": 899.00, "stock": 3, "image_url": None},
}

@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
