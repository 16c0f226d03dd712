"""Cloud Endpoints echo sample.

Deployed to App Engine by the deployment test; the Endpoints proxy in front
of it enforces the API key and JWT rules from openapi.yaml.
"""

import base64
import json
import os

import uvicorn
from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Endpoints Echo", description="Echoes messages back")


class EchoMessage(BaseModel):
    message: str


@app.post("/echo", response_model=EchoMessage)
async def echo(body: EchoMessage):
    return EchoMessage(message=body.message)


@app.get("/auth/info/googlejwt")
async def auth_info(
    x_endpoint_api_userinfo: str | None = Header(default=None),
):
    """Return the caller identity forwarded by the Endpoints proxy."""
    if not x_endpoint_api_userinfo:
        return {"id": "anonymous"}
    try:
        padded = x_endpoint_api_userinfo + "=" * (-len(x_endpoint_api_userinfo) % 4)
        return json.loads(base64.urlsafe_b64decode(padded))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid user info header: {e}")


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
