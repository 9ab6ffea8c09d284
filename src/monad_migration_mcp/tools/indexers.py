"""Indexer tools: Envio HyperIndex config, Goldsky subgraph manifest."""

from mcp.types import Tool, TextContent

from . import ToolModule
from .helpers import text_arg, list_arg, event_name, code_block, text_report
from ..config import MonadConfig
from ..errors import OperationNotFound

GOLDSKY_DEPLOY = "goldsky subgraph deploy <subgraph-name> --path ."

ENVIO_COMMANDS = """npm install -g envio
envio init
# Replace generated config with above
envio dev  # Start indexing"""


def _envio_handler(event: str) -> str:
    name = event_name(event)
    return f"""
// Handler for {name}
MyContract.{name}.handler(async ({{ event, context }}) => {{
  const entity: MyContract_{name} = {{
    id: `${{event.chainId}}_${{event.block.number}}_${{event.logIndex}}`,
    // Add event parameters here
  }};

  context.MyContract_{name}.set(entity);
}});"""


def render_setup_envio_indexer(config: MonadConfig, arguments: dict) -> str:
    op = "setup_envio_indexer"
    contract_address = text_arg(arguments, op, "contractAddress")
    events = list_arg(arguments, op, "events")

    event_lines = "\n".join(f"    - event: {event}" for event in events)
    yaml = f"""# Envio HyperIndex Configuration for Monad
name: monad-indexer
networks:
- id: {config.indexers.envio_network_id}  # {config.network.name}
  start_block: 0
  contracts:
  - name: MyContract
    address:
    - {contract_address}
    handler: src/EventHandlers.ts
    events:
{event_lines}"""

    imports = ["MyContract"] + [f"MyContract_{event_name(e)}" for e in events]
    handlers = f'import {{ {", ".join(imports)} }} from "generated";\n'
    handlers += "".join(_envio_handler(event) for event in events)

    known = config.name_for_address(contract_address)
    canonical = f"\n\n> Note: {contract_address} is the canonical **{known}** contract on {config.network.name}." if known else ""

    return f"""## Envio HyperIndex Setup for Monad

### Configuration (config.yaml):
{code_block(yaml, 'yaml')}

### Event Handlers (src/EventHandlers.ts):
{code_block(handlers)}

### Commands:
{code_block(ENVIO_COMMANDS, 'bash')}{canonical}"""


def render_configure_goldsky_subgraph(config: MonadConfig, arguments: dict) -> str:
    op = "configure_goldsky_subgraph"
    contract_name = text_arg(arguments, op, "contractName")
    events = list_arg(arguments, op, "events")
    network = config.indexers.goldsky_network

    entities = "\n".join(f"        - {event_name(event)}" for event in events)
    event_handlers = "\n".join(
        f"        - event: {event}\n          handler: handle{event_name(event)}" for event in events
    )
    manifest = f"""specVersion: 1.2.0
indexerHints:
  prune: auto
schema:
  file: ./schema.graphql
dataSources:
  - kind: ethereum
    name: {contract_name}
    network: {network}
    source:
      address: "CONTRACT_ADDRESS_HERE"
      abi: {contract_name}ABI
      startBlock: 0
    mapping:
      kind: ethereum/events
      apiVersion: 0.0.9
      language: wasm/assemblyscript
      entities:
{entities}
      abis:
        - name: {contract_name}ABI
          file: ./abis/{contract_name}.json
      eventHandlers:
{event_handlers}
      file: ./src/mapping.ts"""

    return f"""## Goldsky Subgraph Configuration

### Subgraph Manifest (subgraph.yaml):
{code_block(manifest, 'yaml')}

### Deploy Command:
{code_block(GOLDSKY_DEPLOY, 'bash')}

### Network: {network}
### Mirror Dataset: {config.indexers.goldsky_mirror_dataset}"""


RENDERERS = {
    "setup_envio_indexer": render_setup_envio_indexer,
    "configure_goldsky_subgraph": render_configure_goldsky_subgraph,
}


def register(config: MonadConfig) -> ToolModule:
    tools = [
        Tool(
            name="setup_envio_indexer",
            description="Set up Envio HyperIndex for Monad",
            inputSchema={
                "type": "object",
                "properties": {
                    "contractAddress": {"type": "string", "description": "Address of the contract to index"},
                    "events": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Event signatures, e.g. 'Transfer(address,address,uint256)'",
                    },
                },
                "required": ["contractAddress", "events"],
            },
        ),
        Tool(
            name="configure_goldsky_subgraph",
            description="Configure Goldsky subgraph for Monad",
            inputSchema={
                "type": "object",
                "properties": {
                    "contractName": {"type": "string", "description": "Name of the contract"},
                    "events": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Event signatures to handle",
                    },
                },
                "required": ["contractName", "events"],
            },
        ),
    ]

    async def handler(name: str, arguments: dict) -> list[TextContent]:
        render = RENDERERS.get(name)
        if render is None:
            raise OperationNotFound(name)
        return text_report(render(config, arguments))

    return ToolModule(name="indexers", tools=tools, handler=handler)
