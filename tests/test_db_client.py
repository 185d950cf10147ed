"""Engine cache in statement_db.client."""

from concurrent.futures import ThreadPoolExecutor

from statement_db.client import dispose_engines, get_engine


def test_concurrent_first_use_shares_one_engine(tmp_path):
    url = f"sqlite:///{tmp_path / 'shared.db'}"

    with ThreadPoolExecutor(max_workers=8) as pool:
        engines = list(pool.map(lambda _: get_engine(database_url=url), range(32)))

    assert len({id(e) for e in engines}) == 1


def test_dispose_engines_drops_the_cache(tmp_path):
    url = f"sqlite:///{tmp_path / 'shared.db'}"
    first = get_engine(database_url=url)

    dispose_engines()

    assert get_engine(database_url=url) is not first
