"""Tests for listing row classification and post assembly (no network access required)."""

from bs4 import BeautifulSoup

from hn_front_miner.models import Info, More, Post, Spacer, Thing, Unrecognized
from hn_front_miner.parser import assemble_posts, classify_row, find_listing_table, parse_page

from listing_pages import entry, info_row, more_rows, page_html, spacer_row, thing_row


def first_row(row_html):
    soup = BeautifulSoup(f"<table>{row_html}</table>", "lxml")
    return soup.select_one("tr")


THING = Thing(id="1", rank="1.", title_line="Foo", link="http://a")
INFO = Info(score="10 points", user="alice", date="2007-10-02T00:00:00", comments="5 comments")


class TestClassifyRow:
    def test_spacer(self):
        assert classify_row(first_row(spacer_row())) == Spacer()

    def test_spacer_ignores_content(self):
        row = '<tr class="spacer" id="9"><td><span class="rank">1.</span><span><a href="x">t</a></span></td></tr>'
        assert classify_row(first_row(row)) == Spacer()

    def test_thing(self):
        assert classify_row(first_row(thing_row())) == THING

    def test_thing_keeps_inner_markup(self):
        row = thing_row(rank="<b>1.</b>", title="Foo <i>bar</i>")
        thing = classify_row(first_row(row))
        assert thing.rank == "<b>1.</b>"
        assert thing.title_line == "Foo <i>bar</i>"

    def test_thing_with_extra_classes(self):
        row = thing_row().replace('class="athing"', 'class="athing submission"')
        assert classify_row(first_row(row)) == THING

    def test_thing_missing_id(self):
        row = thing_row().replace(' id="1"', '', 1)
        assert classify_row(first_row(row)) == Unrecognized()

    def test_thing_missing_rank(self):
        row = thing_row().replace('<span class="rank">1.</span>', '')
        assert classify_row(first_row(row)) == Unrecognized()

    def test_thing_missing_anchor(self):
        row = '<tr class="athing" id="1"><td><span class="rank">1.</span></td><td class="title">Foo</td></tr>'
        assert classify_row(first_row(row)) == Unrecognized()

    def test_thing_anchor_without_href(self):
        row = thing_row().replace('<a href="http://a">', '<a>')
        assert classify_row(first_row(row)) == Unrecognized()

    def test_info(self):
        assert classify_row(first_row(info_row())) == INFO

    def test_info_date_from_title_not_text(self):
        info = classify_row(first_row(info_row(age="2007-10-02T11:22:33 1191324153")))
        assert info.date == "2007-10-02T11:22:33 1191324153"

    def test_info_picks_first_comments_anchor(self):
        row = info_row(comments="12 comments").replace(
            '<a href="hide?id=1">hide</a>', '<a href="hide?id=1">3 comments</a>'
        )
        assert classify_row(first_row(row)).comments == "3 comments"

    def test_info_without_comments_anchor(self):
        # a post with no comments links to "discuss" instead
        row = info_row(comments="discuss")
        assert classify_row(first_row(row)) == Unrecognized()

    def test_info_missing_score(self):
        row = info_row().replace('<span class="score" id="score_1">10 points</span>', '')
        assert classify_row(first_row(row)) == Unrecognized()

    def test_info_missing_user(self):
        row = info_row().replace('class="hnuser"', '')
        assert classify_row(first_row(row)) == Unrecognized()

    def test_info_age_without_title(self):
        row = info_row().replace(' title="2007-10-02T00:00:00"', '')
        assert classify_row(first_row(row)) == Unrecognized()

    def test_more(self):
        soup = BeautifulSoup(f"<table>{more_rows()}</table>", "lxml")
        morespace, more = soup.select("tr")
        assert classify_row(morespace) == Unrecognized()
        assert classify_row(more) == More()

    def test_row_without_class_or_subline(self):
        assert classify_row(first_row("<tr><td>hello</td></tr>")) == Unrecognized()


class TestAssemblePosts:
    def test_scenario_single_post(self):
        posts = assemble_posts([THING, INFO, Spacer()])
        assert posts == [Post(
            id="1", rank="1.", title_line="Foo", link="http://a",
            score="10 points", user="alice",
            date="2007-10-02T00:00:00", comments="5 comments",
        )]

    def test_preserves_order(self):
        second = Thing(id="2", rank="2.", title_line="Bar", link="http://b")
        posts = assemble_posts([THING, INFO, Spacer(), second, INFO, Spacer(), More()])
        assert [p.id for p in posts] == ["1", "2"]

    def test_thing_followed_by_thing_drops_first(self):
        second = Thing(id="2", rank="2.", title_line="Bar", link="http://b")
        posts = assemble_posts([THING, second, INFO])
        assert [p.id for p in posts] == ["2"]

    def test_thing_followed_by_spacer_is_dropped(self):
        assert assemble_posts([THING, Spacer(), INFO]) == []

    def test_thing_followed_by_unrecognized_is_dropped(self):
        assert assemble_posts([THING, Unrecognized(), INFO]) == []

    def test_stray_info_ignored(self):
        assert assemble_posts([INFO, Spacer(), INFO]) == []

    def test_info_only_pairs_once(self):
        posts = assemble_posts([THING, INFO, INFO])
        assert len(posts) == 1

    def test_trailing_thing_dropped(self):
        assert assemble_posts([THING]) == []

    def test_empty(self):
        assert assemble_posts([]) == []

    def test_accepts_generator(self):
        posts = assemble_posts(row for row in [THING, INFO])
        assert len(posts) == 1


class TestParsePage:
    def test_bigbox_layout(self):
        html = page_html([entry("1", "1."), entry("2", "2."), more_rows()])
        result = parse_page(html)
        assert result.table_found is True
        assert result.has_more is True
        assert [p.id for p in result.posts] == ["1", "2"]
        assert [p.rank for p in result.posts] == ["1.", "2."]

    def test_itemlist_layout(self):
        result = parse_page(page_html([entry("7", "31.")], itemlist=True))
        assert result.table_found is True
        assert result.has_more is False
        assert result.posts[0].id == "7"
        assert result.posts[0].rank == "31."

    def test_scenario_single_post_page(self):
        html = page_html([thing_row(), info_row(), spacer_row()])
        result = parse_page(html)
        assert [p.to_dict() for p in result.posts] == [{
            "id": "1", "rank": "1.", "title_line": "Foo", "link": "http://a",
            "score": "10 points", "user": "alice",
            "date": "2007-10-02T00:00:00", "comments": "5 comments",
        }]

    def test_missing_table(self):
        result = parse_page(page_html([], table=False))
        assert result.table_found is False
        assert result.posts == []

    def test_empty_table(self):
        result = parse_page(page_html([]))
        assert result.table_found is True
        assert result.posts == []

    def test_malformed_row_does_not_stop_page(self):
        broken = thing_row(item_id="2").replace('<span class="rank">1.</span>', '')
        html = page_html([entry("1"), broken, info_row("2"), spacer_row(), entry("3")])
        assert [p.id for p in parse_page(html).posts] == ["1", "3"]

    def test_tbody_wrapper(self):
        html = f'<html><body><table class="itemlist"><tbody>{entry("5")}</tbody></table></body></html>'
        assert [p.id for p in parse_page(html).posts] == ["5"]

    def test_layouts_can_alternate(self):
        pages = [
            page_html([entry("1")]),
            page_html([entry("2")], itemlist=True),
            page_html([entry("3")]),
            page_html([entry("4")], itemlist=True),
        ]
        assert [[p.id for p in parse_page(html).posts] for html in pages] == [["1"], ["2"], ["3"], ["4"]]


class TestFindListingTable:
    def test_prefers_itemlist(self):
        soup = BeautifulSoup(page_html([entry("1")], itemlist=True), "lxml")
        assert find_listing_table(soup).get("class") == ["itemlist"]

    def test_bigbox_inner_table(self):
        soup = BeautifulSoup(page_html([entry("1")]), "lxml")
        table = find_listing_table(soup)
        assert table.find_parent("tr").get("id") == "bigbox"

    def test_none_when_absent(self):
        soup = BeautifulSoup(page_html([], table=False), "lxml")
        assert find_listing_table(soup) is None
