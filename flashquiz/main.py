from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flashquiz import config
from flashquiz.routers import drafts, editor, quiz, results, score

# Create FastAPI app
app = FastAPI(title="Flashcard Quiz")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(score.router, prefix="/api")
app.include_router(editor.router, prefix="/api")
app.include_router(drafts.router, prefix="/api")
app.include_router(quiz.router)
app.include_router(results.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.on_event("startup")
def startup_event():
    """Report where answers will be sent for judging."""
    print(f"[JUDGE] Judging answers via {config.JUDGE_URL}")


@app.on_event("shutdown")
def shutdown_event():
    """Save any draft still waiting for its quiet period."""
    drafts.flush_pending_draft()
