"""Tests for the zustand and redux store generators."""

from __future__ import annotations

from reatchify.generator.stores import generate_stores
from reatchify.models import ApiSchema


class TestZustand:
    def test_files(self, schema: ApiSchema, config) -> None:
        files = generate_stores(schema, config)
        assert list(files) == [
            "stores/apiStore.ts",
            "stores/getUsersStore.ts",
            "stores/getUsersByIdStore.ts",
            "stores/createUsersStore.ts",
            "stores/deleteUsersByIdStore.ts",
            "stores/getPostsStore.ts",
            "stores/createPostsStore.ts",
            "stores/index.ts",
        ]

    def test_api_store(self, schema: ApiSchema, config) -> None:
        content = generate_stores(schema, config)["stores/apiStore.ts"]
        assert "import { create } from 'zustand';" in content
        assert "export const useApiStore = create<ApiState>((set) => ({" in content

    def test_endpoint_store(self, schema: ApiSchema, config) -> None:
        content = generate_stores(schema, config)["stores/getUsersByIdStore.ts"]
        assert "import { getUsersById } from '../api/users';" in content
        assert "import type { User } from '../types/index';" in content
        assert "export const useGetUsersByIdStore = create<GetUsersByIdState>((set) => ({" in content
        assert "data: User | null;" in content
        assert "fetch: (params: { id: string }) => Promise<void>;" in content
        assert "const { data, error } = await getUsersById(params);" in content

    def test_store_without_params(self, schema: ApiSchema, config) -> None:
        content = generate_stores(schema, config)["stores/getUsersStore.ts"]
        assert "fetch: () => Promise<void>;" in content
        assert "await getUsers();" in content

    def test_promise_pattern(self, schema: ApiSchema, make_config) -> None:
        config = make_config(response={"pattern": "promise"})
        content = generate_stores(schema, config)["stores/getUsersStore.ts"]
        assert "const data = await getUsers();" in content
        assert "{ data, error }" not in content

    def test_store_prefix(self, schema: ApiSchema, make_config) -> None:
        files = generate_stores(schema, make_config(naming={"storePrefix": "$"}))
        assert "export const $ApiStore" in files["stores/apiStore.ts"]
        assert "export const $GetUsersStore" in files["stores/getUsersStore.ts"]

    def test_flat_api_import(self, schema: ApiSchema, make_config) -> None:
        config = make_config(api={"groupByResource": False})
        content = generate_stores(schema, config)["stores/getPostsStore.ts"]
        assert "import { getPosts } from '../api/index';" in content

    def test_index(self, schema: ApiSchema, config) -> None:
        index = generate_stores(schema, config)["stores/index.ts"]
        assert "export * from './apiStore';" in index
        assert "export * from './createPostsStore';" in index

    def test_only_selected_services(self, schema: ApiSchema, make_config) -> None:
        files = generate_stores(schema, make_config(services={"include": ["posts"]}))
        assert set(files) == {
            "stores/apiStore.ts",
            "stores/getPostsStore.ts",
            "stores/createPostsStore.ts",
            "stores/index.ts",
        }


class TestRedux:
    def test_files(self, schema: ApiSchema, make_config) -> None:
        files = generate_stores(schema, make_config(stateManagement="redux"))
        assert "stores/apiSlice.ts" in files
        assert "stores/getUsersSlice.ts" in files
        assert "stores/createPostsSlice.ts" in files
        assert "stores/store.ts" in files
        assert "stores/hooks.ts" in files
        assert list(files)[-1] == "stores/index.ts"

    def test_slice(self, schema: ApiSchema, make_config) -> None:
        files = generate_stores(schema, make_config(stateManagement="redux"))
        content = files["stores/getUsersByIdSlice.ts"]
        assert "import { getUsersById } from '../api/users';" in content
        assert "import type { User } from '../types/index';" in content
        assert "export const getUsersByIdThunk = createAsyncThunk(" in content
        assert "async (args: { id: string }) => {" in content
        assert "const { data, error } = await getUsersById(args);" in content
        assert "export const getUsersByIdSlice = createSlice({" in content

    def test_slice_promise_pattern(self, schema: ApiSchema, make_config) -> None:
        config = make_config(stateManagement="redux", response={"pattern": "promise"})
        content = generate_stores(schema, config)["stores/getUsersSlice.ts"]
        assert "return getUsers();" in content

    def test_store_combines_slices(self, schema: ApiSchema, make_config) -> None:
        content = generate_stores(schema, make_config(stateManagement="redux"))["stores/store.ts"]
        assert "api: apiSlice.reducer," in content
        assert "getUsers: getUsersSlice.reducer," in content
        assert "import { createPostsSlice } from './createPostsSlice';" in content
        assert "export type RootState = ReturnType<typeof store.getState>;" in content

    def test_hooks(self, schema: ApiSchema, make_config) -> None:
        config = make_config(stateManagement="redux", naming={"hookPrefix": "useTyped"})
        content = generate_stores(schema, config)["stores/hooks.ts"]
        assert "export const useTypedAppDispatch = () => useDispatch<AppDispatch>();" in content
        assert "export const useTypedAppSelector: TypedUseSelectorHook<RootState>" in content

    def test_index(self, schema: ApiSchema, make_config) -> None:
        index = generate_stores(schema, make_config(stateManagement="redux"))["stores/index.ts"]
        assert "export * from './apiSlice';" in index
        assert "export * from './store';" in index
        assert "export * from './hooks';" in index


class TestNone:
    def test_no_files(self, schema: ApiSchema, make_config) -> None:
        assert generate_stores(schema, make_config(stateManagement="none")) == {}
