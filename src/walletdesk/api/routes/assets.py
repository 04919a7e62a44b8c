"""Asset registry endpoint."""

from fastapi import APIRouter, Request

from walletdesk.contracts.assets import RegistryEntryInfo, RegistryListResponse

router = APIRouter(prefix="/assets")


@router.get("/registry", response_model=RegistryListResponse)
async def get_registry(request: Request) -> RegistryListResponse:
    """Configured tokens in display order (the native asset always comes first)."""
    aggregator = request.app.state.controller.aggregator
    tokens = [
        RegistryEntryInfo(name=entry.name, address=entry.address)
        for entry in aggregator.registry
    ]
    return RegistryListResponse(
        native_symbol=aggregator.native_symbol,
        native_decimals=aggregator.native_decimals,
        tokens=tokens,
        total=len(tokens),
    )
