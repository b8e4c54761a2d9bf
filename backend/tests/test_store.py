import threading

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gameshow.errors import DuplicateKeyError, NotFoundError, StoreIntegrityError, ValidationError
from gameshow.models import User


CHOICES = ['a', 'b', 'c', 'd', 'e', 'f', 'g']


def _add(store, **overrides):
    fields = {
        'category': 'General',
        'text': 'Pick one',
        'answer': 'a',
        'choices': ['a', 'b'],
        'points': 100,
    }
    fields.update(overrides)
    return store.add_question(**fields)


def test_concurrent_create_user_allows_exactly_one(bare_app):
    store = bare_app.extensions['entity_store']
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def worker():
        with bare_app.app_context():
            barrier.wait()
            try:
                store.create_user('admin', 'hash')
                result = 'ok'
            except DuplicateKeyError:
                result = 'duplicate'
            with lock:
                outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ['duplicate', 'ok']
    assert User.query.filter_by(username='admin').count() == 1


def test_create_user_is_case_sensitive(bare_app):
    store = bare_app.extensions['entity_store']
    first = store.create_user('Host', 'h1')
    second = store.create_user('host', 'h2')
    assert first['id'] != second['id']
    with pytest.raises(DuplicateKeyError) as exc:
        store.create_user('Host', 'h3')
    assert exc.value.field == 'username'
    assert exc.value.to_dict()['details'] == {'field': 'username', 'value': 'Host'}


def test_user_records_hide_password_hash(store):
    user = store.find_user_by_username('admin')
    assert 'password_hash' not in user
    assert store.get_user(user['id']) == user
    assert store.find_user_by_username('admin', include_hash=True)['password_hash']


def test_uniqueness_index_disagreement_is_fatal(bare_app, monkeypatch):
    store = bare_app.extensions['entity_store']

    def failing_commit(self):
        raise IntegrityError('INSERT INTO user', {}, Exception('UNIQUE constraint failed'))

    monkeypatch.setattr(Session, 'commit', failing_commit)
    with pytest.raises(StoreIntegrityError) as exc:
        store.create_user('ghost', 'hash')
    assert exc.value.status_code == 500


def test_initialize_is_idempotent(bare_app):
    store = bare_app.extensions['entity_store']
    store.initialize()
    store.initialize()
    assert User.query.filter_by(username='admin').count() == 1
    assert len(store.get_all_questions()) == 10


def test_initialize_keeps_existing_admin(bare_app):
    store = bare_app.extensions['entity_store']
    existing = store.create_user('admin', 'custom-hash')
    store.initialize(seed_questions=False)
    admin = store.find_user_by_username('admin', include_hash=True)
    assert admin['id'] == existing['id']
    assert admin['password_hash'] == 'custom-hash'
    assert store.get_all_questions() == []


def test_create_tournament_requires_existing_owner(store):
    with pytest.raises(NotFoundError) as exc:
        store.create_tournament('Cup', 'nonexistent-id')
    assert exc.value.resource == 'user'


def test_create_tournament_binds_owner(store):
    admin = store.find_user_by_username('admin')
    tournament = store.create_tournament('Cup', admin['id'])
    assert tournament['owner_user_id'] == admin['id']
    assert tournament['name'] == 'Cup'
    assert tournament['created_at']
    assert store.get_tournament(tournament['id']) == tournament


def test_create_tournament_rejects_blank_name(store):
    admin = store.find_user_by_username('admin')
    with pytest.raises(ValidationError) as exc:
        store.create_tournament('  ', admin['id'])
    assert exc.value.field == 'name'


def test_list_tournaments_preserves_insertion_order(store):
    admin = store.find_user_by_username('admin')
    names = ['Zeta', 'Alpha', 'Mid']
    for name in names:
        store.create_tournament(name, admin['id'])
    assert [t['name'] for t in store.list_tournaments()] == names


@pytest.mark.parametrize('count', [2, 6])
def test_add_question_accepts_choice_bounds(store, count):
    question = _add(store, choices=CHOICES[:count])
    assert question['choices'] == CHOICES[:count]


@pytest.mark.parametrize('count', [1, 7])
def test_add_question_rejects_choice_counts_out_of_range(store, count):
    with pytest.raises(ValidationError) as exc:
        _add(store, choices=CHOICES[:count])
    assert exc.value.field == 'choices'


@pytest.mark.parametrize('points', [1, 1000])
def test_add_question_accepts_point_bounds(store, points):
    assert _add(store, points=points)['points'] == points


@pytest.mark.parametrize('points', [0, 1001])
def test_add_question_rejects_points_out_of_range(store, points):
    with pytest.raises(ValidationError) as exc:
        _add(store, points=points)
    assert exc.value.field == 'points'
    assert '1000' in exc.value.constraint


def test_add_question_rejects_empty_text(store):
    with pytest.raises(ValidationError) as exc:
        _add(store, text='')
    assert exc.value.field == 'text'


def test_answer_outside_choices_is_accepted(store):
    question = _add(store, answer='z')
    assert question['answer'] == 'z'


def test_returned_records_are_copies(store):
    question = _add(store)
    question['choices'].append('mutated')
    question['text'] = 'mutated'
    stored = store.get_question(question['id'])
    assert stored['choices'] == ['a', 'b']
    assert stored['text'] == 'Pick one'
    listed = store.get_all_questions()
    listed.clear()
    assert store.get_all_questions()


def test_delete_question_is_idempotent(store):
    assert store.delete_question('missing-id') is True
    assert store.delete_question('missing-id') is True
    question = _add(store)
    assert store.delete_question(question['id']) is True
    assert store.get_question(question['id']) is None
    assert store.delete_question(question['id']) is True


def test_question_listing_preserves_insertion_order(bare_app):
    store = bare_app.extensions['entity_store']
    texts = ['third?', 'first?', 'second?']
    for text in texts:
        _add(store, text=text)
    assert [q['text'] for q in store.get_all_questions()] == texts


def test_question_by_category_falls_back_to_random(store):
    music = store.get_question_by_category('Music')
    assert music['category'] == 'Music'
    assert store.get_question_by_category('Nope') is not None


def test_random_question_on_empty_store(bare_app):
    store = bare_app.extensions['entity_store']
    assert store.get_random_question() is None
    assert store.get_question_by_category('General') is None


def test_categories_are_distinct_in_first_seen_order(bare_app):
    store = bare_app.extensions['entity_store']
    assert store.list_categories() == []
    for category in ['Sports', 'Art', 'Sports', '']:
        _add(store, category=category)
    assert store.list_categories() == ['Sports', 'Art', '']


def test_round_results_validate_outcome_and_tournament(store):
    admin = store.find_user_by_username('admin')
    tournament = store.create_tournament('Cup', admin['id'])
    with pytest.raises(ValidationError):
        store.record_round_result(tournament['id'], 'q', 1, 'timeout', 0)
    with pytest.raises(NotFoundError):
        store.record_round_result('missing', 'q', 1, 'expired', 30)
    result = store.record_round_result(tournament['id'], 'q', 1, 'expired', 30)
    assert store.list_round_results(tournament['id']) == [result]
