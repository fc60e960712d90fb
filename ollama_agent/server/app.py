"""
HTTP Endpoint
=============

FastAPI app exposing the agent over HTTP.

Routes:
    POST /mcp     Run the agent on a message history
    GET  /tools   List the tool catalog
    GET  /health  Liveness check

Request:
    {"messages": [{"role": "user", "content": "What is 2 + 2?"}]}

Response:
    {"message": {"role": "assistant", "content": "..."},
     "all_messages": [...full history...]}

Validation happens here, before a run starts: a body without a well-formed
messages array gets a 400. A run that fails (model unreachable, round-trip
cap hit) gets a 500; tool errors are part of the conversation and never fail
the request.
"""

from typing import Literal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from ollama_agent.agent import AgentRunner, Message, ToolCallRequest, final_answer
from ollama_agent.utils.logger import Logger

logger = Logger("Server")

INVALID_REQUEST = "Invalid request: messages array is required"


class ToolCallModel(BaseModel):
    """A tool call requested by an assistant message."""
    id: str
    name: str
    args: dict = Field(default_factory=dict)


class MessageModel(BaseModel):
    """One message on the wire. "function" is accepted as an alias for "tool"."""
    role: Literal["system", "user", "assistant", "tool"]
    content: str
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[ToolCallModel] | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _function_is_tool(cls, value):
        return "tool" if value == "function" else value

    def to_message(self) -> Message:
        # Tool fields are only kept on the role they belong to
        is_tool = self.role == "tool"
        calls = self.tool_calls if self.role == "assistant" else None
        return Message(
            role=self.role,
            content=self.content,
            name=self.name if is_tool else None,
            tool_call_id=self.tool_call_id if is_tool else None,
            tool_calls=tuple(
                ToolCallRequest(id=call.id, name=call.name, args=dict(call.args))
                for call in calls or ()
            ),
        )

    @classmethod
    def from_message(cls, message: Message) -> "MessageModel":
        return cls(
            role=message.role,
            content=message.content,
            name=message.name,
            tool_call_id=message.tool_call_id,
            tool_calls=[
                ToolCallModel(id=call.id, name=call.name, args=call.args)
                for call in message.tool_calls
            ] or None,
        )


class McpRequest(BaseModel):
    messages: list[MessageModel] = Field(min_length=1)


class McpResponse(BaseModel):
    message: MessageModel | None
    all_messages: list[MessageModel]


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: dict


def create_app(agent: AgentRunner) -> FastAPI:
    """
    Create the FastAPI app around an agent runner.

    Args:
        agent: The runner used for every request; each request gets its own
            AgentState, so the runner is shared safely

    Returns:
        The configured app
    """
    app = FastAPI(title="ollama-agent")
    app.state.agent = agent

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected request to {request.url.path}: {len(exc.errors())} validation error(s)")
        return JSONResponse(status_code=400, content={"error": INVALID_REQUEST})

    @app.post("/mcp", response_model=McpResponse, response_model_exclude_none=True)
    async def mcp(body: McpRequest):
        seed = [message.to_message() for message in body.messages]
        logger.info(f"Running agent on {len(seed)} message(s)")

        try:
            state = await agent.run(seed)
        except Exception as e:
            logger.error("Error processing request", e)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        answer = final_answer(state.history)
        return McpResponse(
            message=MessageModel.from_message(answer) if answer else None,
            all_messages=[MessageModel.from_message(m) for m in state.history],
        )

    @app.get("/tools", response_model=list[ToolInfo])
    async def tools():
        return [
            ToolInfo(name=tool.name, description=tool.description, parameters=tool.parameters)
            for tool in agent.loop.registry.get_all()
        ]

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app
