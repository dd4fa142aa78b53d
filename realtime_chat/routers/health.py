"""
Health check and statistics endpoints
"""
from datetime import datetime
from fastapi import APIRouter

from realtime_chat.database import check_database_health, get_pool_status, get_query_stats
from realtime_chat.realtime import registry, channel
from realtime_chat.services import cache_service

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Health check endpoint"""
    db_healthy = check_database_health()
    redis_stats = cache_service.get_stats()
    redis_healthy = "error" not in redis_stats
    
    if not redis_stats.get("enabled", True):
        redis_status = "disabled"
    else:
        redis_status = "up" if redis_healthy else "down"
    
    return {
        "status": "healthy" if (db_healthy and redis_healthy) else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "database": "up" if db_healthy else "down",
            "redis": redis_status
        },
        "websocket": {
            "active_connections": registry.count()
        }
    }


@router.get("/stats/pool")
def get_pool_stats():
    """Get connection pool statistics"""
    return get_pool_status()


@router.get("/stats/queries")
def get_query_statistics():
    """Get query execution statistics"""
    stats = get_query_stats()
    
    total = stats['total_queries']
    slow = stats['slow_queries']
    
    return {
        **stats,
        "slow_query_percentage": round((slow / total * 100) if total > 0 else 0, 2)
    }


@router.get("/stats/redis")
def get_redis_stats():
    """Get Redis statistics"""
    return cache_service.get_stats()


@router.get("/stats/websocket")
def get_websocket_stats():
    """Get WebSocket and fan-out statistics"""
    return {
        "active_connections": registry.count(),
        "broadcast": channel.get_stats()
    }
