from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from treasury_chat.routes import auth, chat, council, trade, websocket
from treasury_chat.database import init_db
from treasury_chat.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Council Treasury Chat")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create database tables for SQLAlchemy
init_db()

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(chat.router, prefix="/api", tags=["Chat"])
app.include_router(council.router, prefix="/api", tags=["Council"])
app.include_router(trade.router, prefix="/api/trades", tags=["Trades"])
app.include_router(websocket.router, tags=["Notifications"])

@app.get("/")
async def root():
    return {"message": "Council Treasury Chat API"}
