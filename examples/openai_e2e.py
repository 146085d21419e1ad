#!/usr/bin/env python3
"""
End-to-end example: an OpenAI Chat Completions agent loop whose history is
compacted with ctx-stash after every turn. The model gets readFile and
grepAndSearchFile so it can look at persisted tool results on demand.

Requirements:
    pip install "ctx-stash[examples]"
    export OPENAI_API_KEY="your-key-here"
"""

import asyncio
import json
import os
from typing import Any, Dict, List

from openai import OpenAI

from ctxstash import CompactOptions, KnownKeyRegistry, compact_messages
from ctxstash.tools import (
    GrepAndSearchFileOptions,
    ReadFileOptions,
    create_grep_and_search_file_tool,
    create_read_file_tool,
)

STORAGE_URI = "file:///tmp/ctxstash-openai-storage"
MODEL = "gpt-4o"

client = OpenAI(api_key=os.getenv("OPENAI_API_KEY"))

# One registry shared by compaction and the reader tools
known_keys = KnownKeyRegistry()


def get_inventory(warehouse: str) -> Dict[str, Any]:
    """Dummy tool that returns a large inventory listing."""
    return {
        "warehouse": warehouse,
        "items": [
            {
                "sku": f"SKU-{i:05d}",
                "name": f"Item {i}",
                "quantity": (i * 37) % 500,
                "status": "backordered" if i % 17 == 0 else "in_stock",
                "notes": f"Shelf {i % 40}, bin {i % 12}" * 4,
            }
            for i in range(1500)
        ],
    }


read_file_tool = create_read_file_tool(ReadFileOptions(storage=STORAGE_URI, known_keys=known_keys))
grep_tool = create_grep_and_search_file_tool(
    GrepAndSearchFileOptions(storage=STORAGE_URI, known_keys=known_keys)
)

TOOLS = {
    "get_inventory": get_inventory,
    read_file_tool.__name__: read_file_tool,
    grep_tool.__name__: grep_tool,
}

TOOL_DEFINITIONS = [
    {
        "type": "function",
        "function": {
            "name": "get_inventory",
            "description": "List every item stocked in a warehouse",
            "parameters": {
                "type": "object",
                "properties": {"warehouse": {"type": "string"}},
                "required": ["warehouse"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": read_file_tool.__name__,
            "description": read_file_tool.__doc__.strip(),
            "parameters": {
                "type": "object",
                "properties": {"key": {"type": "string"}},
                "required": ["key"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": grep_tool.__name__,
            "description": grep_tool.__doc__.strip(),
            "parameters": {
                "type": "object",
                "properties": {
                    "key": {"type": "string"},
                    "pattern": {"type": "string"},
                    "flags": {"type": "string"},
                },
                "required": ["key", "pattern"],
            },
        },
    },
]


def to_openai_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten ctx-stash tool-result parts into OpenAI tool messages."""
    formatted = []
    for msg in messages:
        if msg["role"] != "tool":
            formatted.append({k: v for k, v in msg.items() if k in ("role", "content", "tool_calls")})
            continue
        for part in msg["content"]:
            output = part["output"]
            if output["type"] == "text":
                content = output["value"]
            else:
                content = json.dumps(output["value"])
            formatted.append(
                {"role": "tool", "tool_call_id": part["toolCallId"], "content": content}
            )
    return formatted


async def main():
    messages: List[Dict[str, Any]] = [
        {"role": "system", "content": "You are a warehouse assistant. Use the tools."},
        {"role": "user", "content": "Which items in the Berlin warehouse are backordered?"},
    ]
    options = CompactOptions(storage=STORAGE_URI, boundary="all", known_keys=known_keys)

    for step in range(6):
        response = client.chat.completions.create(
            model=MODEL, messages=to_openai_messages(messages), tools=TOOL_DEFINITIONS
        )
        reply = response.choices[0].message

        if not reply.tool_calls:
            messages.append({"role": "assistant", "content": reply.content or ""})
            print(f"\n✅ Final answer:\n{reply.content}")
            break

        messages.append(
            {
                "role": "assistant",
                "content": reply.content or "",
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {"name": tc.function.name, "arguments": tc.function.arguments},
                    }
                    for tc in reply.tool_calls
                ],
            }
        )

        for tc in reply.tool_calls:
            print(f"🔧 step {step}: {tc.function.name}({tc.function.arguments})")
            result = TOOLS[tc.function.name](**json.loads(tc.function.arguments))
            messages.append(
                {
                    "role": "tool",
                    "content": [
                        {
                            "type": "tool-result",
                            "toolCallId": tc.id,
                            "toolName": tc.function.name,
                            "output": {"type": "json", "value": result},
                        }
                    ],
                }
            )

        # Compaction only runs once the history ends in assistant text
        messages.append({"role": "assistant", "content": "Tool results received."})

        before = len(json.dumps(messages))
        messages = await compact_messages(messages, options)
        after = len(json.dumps(messages))
        print(f"📊 history {before:,} -> {after:,} bytes")


if __name__ == "__main__":
    asyncio.run(main())
