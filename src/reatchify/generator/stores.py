"""State-management generator.

``zustand`` emits one ``create()`` hook per endpoint plus a shared
``apiStore``; ``redux`` emits one slice (``createAsyncThunk`` feeding
pending/fulfilled/rejected) per endpoint, a shared ``apiSlice``, the
configured store and typed hooks. ``none`` emits nothing.

Stores cover the same endpoints as the api group, so every store import
names a function that was actually generated.
"""

from __future__ import annotations

from typing import Optional

from reatchify.generator.api import ServiceSelection, api_module, response_type, selected_endpoints
from reatchify.generator.render import (
    doc_comment,
    export_all,
    file_path,
    header_comment,
    import_block,
    import_line,
    join_blocks,
    module_path,
    relative_import,
    render_template,
)
from reatchify.generator.types import schema_types_in
from reatchify.models import ApiSchema, Endpoint, ResolvedConfig
from reatchify.naming import derive_method_name, render_parameter_type, store_name


def _referenced_types(schema: ApiSchema, endpoint: Endpoint) -> list[str]:
    names: list[str] = []
    for expression in [p.type for p in endpoint.parameters] + [response_type(endpoint)]:
        for name in schema_types_in(expression, schema):
            if name not in names:
                names.append(name)
    return names


def _types_import(config: ResolvedConfig, path: str, names: list[str]) -> str:
    types_index = module_path(config.folder_structure.types, "index")
    return import_line(names, relative_import(path, types_index), type_only=True)


# --- zustand ---


def _zustand_api_store(config: ResolvedConfig) -> str:
    hook = f"{config.naming.store_prefix}ApiStore"
    body = f"""\
interface ApiState {{
  loading: boolean;
  error: string | null;
  setLoading: (loading: boolean) => void;
  setError: (error: string | null) => void;
  reset: () => void;
}}

export const {hook} = create<ApiState>((set) => ({{
  loading: false,
  error: null,
  setLoading: (loading) => set({{ loading }}),
  setError: (error) => set({{ error }}),
  reset: () => set({{ loading: false, error: null }}),
}}));"""
    return join_blocks(
        [
            header_comment(config, "Global API store", "Shared loading and error flags"),
            "import { create } from 'zustand';",
            "\n".join(p for p in (doc_comment(config, ["Shared API state"]), body) if p),
        ]
    )


def _zustand_fetch_body(config: ResolvedConfig, method: str, call_args: str) -> list[str]:
    if config.uses_result_pattern:
        return [
            f"      const {{ data, error }} = await {method}({call_args});",
            "      if (error) {",
            "        set({ error: error.message, loading: false });",
            "        return;",
            "      }",
            "      set({ data, loading: false });",
        ]
    return [
        f"      const data = await {method}({call_args});",
        "      set({ data, loading: false });",
    ]


def _zustand_endpoint_store(
    config: ResolvedConfig, schema: ApiSchema, endpoint: Endpoint, path: str
) -> str:
    method = derive_method_name(endpoint)
    state = f"{store_name(endpoint)}State"
    hook = f"{config.naming.store_prefix}{store_name(endpoint)}Store"
    has_params = bool(endpoint.parameters)
    args_decl = f"params: {render_parameter_type(endpoint.parameters)}" if has_params else ""
    call_args = "params" if has_params else ""

    imports = [
        "import { create } from 'zustand';",
        import_line([method], relative_import(path, api_module(config, endpoint))),
        _types_import(config, path, _referenced_types(schema, endpoint)),
    ]

    lines = [
        f"interface {state} {{",
        f"  data: {response_type(endpoint)} | null;",
        "  loading: boolean;",
        "  error: string | null;",
        f"  fetch: ({args_decl}) => Promise<void>;",
        "  reset: () => void;",
        "}",
        "",
    ]
    doc = doc_comment(config, [f"Store for {endpoint.method} {endpoint.path}"])
    if doc:
        lines.append(doc)
    lines += [
        f"export const {hook} = create<{state}>((set) => ({{",
        "  data: null,",
        "  loading: false,",
        "  error: null,",
        f"  fetch: async ({call_args}) => {{",
        "    set({ loading: true, error: null });",
        "    try {",
        *_zustand_fetch_body(config, method, call_args),
        "    } catch (error) {",
        "      set({ error: error instanceof Error ? error.message : String(error), loading: false });",
        "    }",
        "  },",
        "  reset: () => set({ data: null, loading: false, error: null }),",
        "}));",
    ]
    return join_blocks(
        [
            header_comment(config, f"Zustand store for {method}"),
            import_block(imports),
            "\n".join(lines),
        ]
    )


def _generate_zustand(
    schema: ApiSchema, config: ResolvedConfig, endpoints: list[Endpoint]
) -> dict[str, str]:
    folder = config.folder_structure.stores
    files: dict[str, str] = {}
    modules = [module_path(folder, "apiStore")]
    files[file_path(folder, "apiStore")] = _zustand_api_store(config)
    for endpoint in endpoints:
        module = module_path(folder, f"{derive_method_name(endpoint)}Store")
        modules.append(module)
        files[module + ".ts"] = _zustand_endpoint_store(config, schema, endpoint, module + ".ts")

    index_path = file_path(folder, "index")
    files[index_path] = join_blocks(
        [
            header_comment(config, "Store exports"),
            export_all(relative_import(index_path, module) for module in modules),
        ]
    )
    return files


# --- redux ---

_REDUX_API_SLICE = """\
import { createSlice } from '@reduxjs/toolkit';
import type { PayloadAction } from '@reduxjs/toolkit';

interface ApiState {
  loading: boolean;
  error: string | null;
}

const initialState: ApiState = {
  loading: false,
  error: null,
};

export const apiSlice = createSlice({
  name: 'api',
  initialState,
  reducers: {
    setLoading: (state, action: PayloadAction<boolean>) => {
      state.loading = action.payload;
    },
    setError: (state, action: PayloadAction<string | null>) => {
      state.error = action.payload;
    },
  },
});

export const { setLoading, setError } = apiSlice.actions;"""


def _redux_hooks(config: ResolvedConfig) -> str:
    prefix = config.naming.hook_prefix
    return join_blocks(
        [
            header_comment(config, "Typed Redux hooks"),
            import_block(
                [
                    "import { useDispatch, useSelector } from 'react-redux';",
                    "import type { TypedUseSelectorHook } from 'react-redux';",
                    "import type { AppDispatch, RootState } from './store';",
                ]
            ),
            f"export const {prefix}AppDispatch = () => useDispatch<AppDispatch>();\n"
            f"export const {prefix}AppSelector: TypedUseSelectorHook<RootState> = useSelector;",
        ]
    )


def _redux_slice(config: ResolvedConfig, schema: ApiSchema, endpoint: Endpoint, path: str) -> str:
    method = derive_method_name(endpoint)
    return render_template(
        "redux_slice.ts.j2",
        comments=config.generation.include_comments,
        jsdoc=config.generation.include_jsdoc,
        endpoint=endpoint,
        method_name=method,
        store_name=store_name(endpoint),
        api_import=relative_import(path, api_module(config, endpoint)),
        type_names=_referenced_types(schema, endpoint),
        types_import=relative_import(path, module_path(config.folder_structure.types, "index")),
        data_type=response_type(endpoint),
        has_params=bool(endpoint.parameters),
        args_type=render_parameter_type(endpoint.parameters),
        result_pattern=config.uses_result_pattern,
    ).lstrip("\n")


def _generate_redux(
    schema: ApiSchema, config: ResolvedConfig, endpoints: list[Endpoint]
) -> dict[str, str]:
    folder = config.folder_structure.stores
    files: dict[str, str] = {
        file_path(folder, "apiSlice"): join_blocks(
            [header_comment(config, "Global API slice"), _REDUX_API_SLICE]
        )
    }
    slices: list[str] = []
    for endpoint in endpoints:
        method = derive_method_name(endpoint)
        slices.append(method)
        path = file_path(folder, f"{method}Slice")
        files[path] = _redux_slice(config, schema, endpoint, path)

    files[file_path(folder, "store")] = render_template(
        "redux_store.ts.j2",
        comments=config.generation.include_comments,
        jsdoc=config.generation.include_jsdoc,
        slices=slices,
    ).lstrip("\n")
    files[file_path(folder, "hooks")] = _redux_hooks(config)

    index_path = file_path(folder, "index")
    stems = ["apiSlice"] + [f"{method}Slice" for method in slices] + ["store", "hooks"]
    files[index_path] = join_blocks(
        [
            header_comment(config, "Store exports"),
            export_all(relative_import(index_path, module_path(folder, stem)) for stem in stems),
        ]
    )
    return files


def generate_stores(
    schema: ApiSchema,
    config: ResolvedConfig,
    selection: Optional[ServiceSelection] = None,
) -> dict[str, str]:
    """Render the ``stores`` group, or nothing for ``stateManagement: none``."""
    if not config.stores_enabled:
        return {}
    endpoints = selected_endpoints(schema, config, selection)
    if config.state_management == "redux":
        return _generate_redux(schema, config, endpoints)
    return _generate_zustand(schema, config, endpoints)
