"""Command line entry point.

Run with:
    veo-agent serve
    veo-agent generate "a cat surfing" --workspace-id 7 --task-id 42
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from veo_agent.config import get_settings
from veo_agent.errors import VideoAgentError
from veo_agent.main import configure_logging, create_app
from veo_agent.schemas.action import ActionContext
from veo_agent.services.capabilities import create_video_agent
from veo_agent.services.video_pipeline import VideoPipeline


async def _generate(prompt: str, action: ActionContext) -> str:
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        agent = create_video_agent(VideoPipeline.from_settings(settings, client))
        return await agent.call("generateVideo", {"prompt": prompt}, action)


def main(argv: list[str] | None = None) -> int:
    argparser = argparse.ArgumentParser(prog="veo-agent")
    sub = argparser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP tool server")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)

    gen = sub.add_parser("generate", help="Generate one video and upload it")
    gen.add_argument("prompt")
    gen.add_argument("--workspace-id", type=int, required=True)
    gen.add_argument("--task-id", type=int, help="Bill the run against this task")

    args = argparser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    if args.command == "serve":
        import uvicorn

        uvicorn.run(create_app(settings), host=args.host or settings.HOST, port=args.port or settings.PORT)
        return 0

    action = ActionContext(
        type=settings.BILLABLE_ACTION_TYPE if args.task_id is not None else "respond-chat-message",
        task={"id": args.task_id} if args.task_id is not None else None,
        workspace={"id": args.workspace_id},
    )
    try:
        print(asyncio.run(_generate(args.prompt, action)))
    except (VideoAgentError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
