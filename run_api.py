import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "realtime_chat.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes
        log_level="info"
    )
