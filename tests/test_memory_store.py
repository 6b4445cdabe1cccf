import pytest
from polycascade.errors import StoreError
from polycascade.store.memory import MemoryStore, matches
from tests.model import Tag

documents = [
    {'_id': 'u1', 'name': 'max', 'tags': ['a', 'b'], 'bikes': [{'_id': 'b1', 'brand': 'Trek'}], 'shop': {'city': 'Basel'}},
    {'_id': 'u2', 'name': 'mira', 'tags': [], 'bikes': [], 'shop': None},
    {'_id': 'u3', 'name': 'mia'},
]


@pytest.fixture
def users():
    store = MemoryStore()
    collection = store.collection('users')
    for document in documents:
        collection.save(document)
    return collection


def _ids(collection, query):
    return sorted(d['_id'] for d in collection.find(query))


def test_matches_equality_and_dotted_paths():
    assert matches(documents[0], {'shop.city': 'Basel'})
    assert matches(documents[0], {'bikes._id': 'b1'})
    assert matches(documents[0], {'tags': 'a'})
    assert not matches(documents[1], {'shop.city': 'Basel'})
    assert matches(documents[2], {})

def test_matches_operators():
    assert matches(documents[0], {'name': {'$in': ['max', 'mia']}})
    assert matches(documents[1], {'name': {'$ne': 'max'}})
    assert matches(documents[2], {'bikes': {'$exists': False}})
    assert matches(documents[2], {'shop': None})
    with pytest.raises(StoreError):
        matches(documents[0], {'name': {'$regex': 'm.*'}})

def test_find(users):
    assert _ids(users, {}) == ['u1', 'u2', 'u3']
    assert _ids(users, {'bikes._id': 'b1'}) == ['u1']

def test_find_returns_copies(users):
    found = next(users.find({'_id': 'u1'}))
    found['name'] = 'changed'
    assert users.find_raw({'_id': 'u1'})[0]['name'] == 'max'

def test_find_decodes_with_document_class():
    store = MemoryStore()
    tags = store.collection('tags', Tag)
    tag = Tag('fast')
    tags.save(tag._to_save_dict())
    assert list(tags.find({})) == [tag]
    assert list(tags.find({}, document_class=None)) == [tag]

def test_update_set_creates_intermediate_documents(users):
    result = users.update_all({'_id': 'u3'}, {'$set': {'shop.city': 'Bern'}})
    assert (result.matched, result.modified) == (1, 1)
    assert users.find_raw({'_id': 'u3'})[0]['shop'] == {'city': 'Bern'}

def test_update_set_replaces_null_parent(users):
    users.update_all({'_id': 'u2'}, {'$set': {'shop.city': 'Bern'}})
    assert users.find_raw({'_id': 'u2'})[0]['shop'] == {'city': 'Bern'}

def test_update_unset(users):
    users.update_all({}, {'$unset': {'tags': ''}})
    assert all('tags' not in d for d in users.find_raw())

def test_update_unchanged_is_not_modified(users):
    result = users.update_all({'_id': 'u1'}, {'$set': {'name': 'max'}})
    assert (result.matched, result.modified) == (1, 0)

def test_update_pull_and_push(users):
    users.update_all({}, {'$pull': {'bikes': {'_id': 'b1'}}})
    users.update_all({'_id': {'$in': ['u1', 'u3']}}, {'$push': {'bikes': {'_id': 'b2'}}})
    docs = {d['_id']: d for d in users.find_raw()}
    assert docs['u1']['bikes'] == [{'_id': 'b2'}]
    assert docs['u2']['bikes'] == []
    assert docs['u3']['bikes'] == [{'_id': 'b2'}]

def test_update_pull_scalar(users):
    users.update_all({'_id': 'u1'}, {'$pull': {'tags': 'a'}})
    assert users.find_raw({'_id': 'u1'})[0]['tags'] == ['b']

def test_update_rejects_non_arrays(users):
    with pytest.raises(StoreError):
        users.update_all({'_id': 'u1'}, {'$push': {'name': 'x'}})
    with pytest.raises(StoreError):
        users.update_all({'_id': 'u1'}, {'$pull': {'shop': {'city': 'Basel'}}})
    with pytest.raises(StoreError):
        users.update_all({'_id': 'u1'}, {'$set': {'name.first': 'x'}})

def test_update_is_atomic_per_document(users):
    with pytest.raises(StoreError):
        users.update_all({'_id': 'u1'}, {'$set': {'name': 'changed'}, '$push': {'name': 'x'}})
    assert users.find_raw({'_id': 'u1'})[0]['name'] == 'max'

def test_save_requires_id(users):
    with pytest.raises(StoreError):
        users.save({'name': 'anonymous'})

def test_remove(users):
    assert users.remove({'name': {'$in': ['max', 'mira']}}) == 2
    assert _ids(users, {}) == ['u3']

def test_operations_log(users):
    store = users._store
    store.operations.clear()
    users.update_all({'_id': 'u1'}, {'$set': {'name': 'x'}})
    list(users.find({}))
    assert [op for _, op, _, _ in store.operations] == ['update_all', 'find']
