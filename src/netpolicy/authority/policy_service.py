"""
FastAPI Policy Service

Reference policy authority served over HTTP. Holds the policy list in
memory and supports full-list reads and full-list replacement, which is
all PolicyEditor needs.
"""

import logging
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from netpolicy.authority.base import AuthorityError
from netpolicy.authority.memory import InMemoryPolicyAuthority
from netpolicy.policy.models import NetworkPolicy


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Network Policy Service",
    description="Reference authority for network usage policies",
    version="0.1.0",
)

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global store
policy_store = InMemoryPolicyAuthority()


@app.get("/")
async def health_check():
    """Service health check."""
    return {"service": "Network Policy Service", "status": "running"}


@app.get("/policies", response_model=List[NetworkPolicy])
async def get_policies():
    """Return every policy held by the service."""
    return policy_store.fetch_all()


@app.put("/policies")
async def replace_policies(policies: List[NetworkPolicy]):
    """
    Replace the full policy list.

    Rejects lists that carry more than one policy for a template.
    """
    try:
        policy_store.replace_all(policies)
    except AuthorityError as e:
        logger.warning(f"Rejected policy list: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Replaced policy list ({len(policies)} entries)")
    return {"status": "replaced", "count": len(policies)}


@app.get("/policies/stats")
async def get_stats():
    """Get service statistics (for debugging)."""
    policies = policy_store.fetch_all()
    subscribers = {p.template.subscriber_id for p in policies if p.template.subscriber_id}

    return {
        "policy_count": len(policies),
        "subscribers_tracked": len(subscribers),
        "write_count": policy_store.write_count,
    }


if __name__ == "__main__":
    import uvicorn
    from netpolicy.authority.config import config

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "netpolicy.authority.policy_service:app",
        host=config.host,
        port=config.port,
        reload=True,
    )
