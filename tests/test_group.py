"""Tests for groups and stages: team queries, match queries and reachability."""

import pytest

from vbcompetitions import Competition
from vbcompetitions.core import Crossover, Group, GroupBreak, GroupType, Knockout, MatchFilter, MatchType, TeamFilter
from vbcompetitions.exceptions import DocumentError, EntityNotFoundError, StructuralError


def entry_ids(entries):
    return [entry.id if not isinstance(entry, GroupBreak) else 'break' for entry in entries]


class TestGroupTeams:
    """Tests for Group.get_team_ids and team involvement."""

    def test_fixed_ids_sorted_by_name(self, league_competition):
        """Literal team IDs come back in team name order."""
        group = league_competition.get_stage('L').get_group('RR')
        assert group.get_team_ids() == ['TM1', 'TM2', 'TM3', 'TM4']

    def test_reference_only_group(self, league_competition):
        """A group of references has no fixed IDs but resolves known teams."""
        group = league_competition.get_stage('KO').get_group('F')

        assert group.get_team_ids(TeamFilter.FIXED_ID) == []
        assert group.get_team_ids(TeamFilter.KNOWN) == ['TM1', 'TM2', 'TM3']
        assert group.get_team_ids(TeamFilter.ALL) == ['{L:RR:league:1}', '{L:RR:league:2}', '{L:RR:league:3}']
        assert group.get_team_ids(TeamFilter.PLAYING) == ['{L:RR:league:1}', '{L:RR:league:2}']
        assert group.get_team_ids(TeamFilter.OFFICIATING) == ['{L:RR:league:3}']

    def test_known_ids_counted_once(self, league_data, make_match):
        """A team named by ID and by a resolved reference is one known team."""
        league_data['stages'][1]['groups'][0]['matches'].append(make_match('F2', 'TM1', 'TM4'))
        competition = Competition.load_from_data(league_data)
        group = competition.get_stage('KO').get_group('F')

        assert group.get_team_ids(TeamFilter.KNOWN) == ['TM1', 'TM2', 'TM3', 'TM4']
        assert group.get_team_ids(TeamFilter.ALL) == [
            '{L:RR:league:1}', '{L:RR:league:2}', '{L:RR:league:3}', 'TM1', 'TM4',
        ]

    def test_unresolved_references_not_known(self, knockout_competition):
        """References into an incomplete group are not known teams."""
        group = knockout_competition.get_stage('K').get_group('CUP')
        assert group.get_team_ids(TeamFilter.KNOWN) == []

    def test_maybe_team_ids(self, knockout_competition):
        """Teams from incomplete groups that feed this group might play in it."""
        group = knockout_competition.get_stage('K').get_group('CUP')
        assert group.get_team_ids(TeamFilter.MAYBE) == ['TM1', 'TM2', 'TM3']

    def test_no_maybe_teams_when_complete(self, league_competition):
        """A complete group has no possible teams, only definite ones."""
        group = league_competition.get_stage('L').get_group('RR')
        assert group.get_team_ids(TeamFilter.MAYBE) == []

    def test_team_has_matches_through_reference(self, league_competition):
        """Resolved references count as the team playing or officiating."""
        group = league_competition.get_stage('KO').get_group('F')

        assert group.team_has_matches('TM1')
        assert group.team_has_matches('TM3')
        assert not group.team_has_matches('TM2')
        assert group.team_has_officiating('TM2')
        assert not group.team_has_officiating('TM1')

    def test_team_may_have_matches(self, knockout_competition):
        """Teams in an incomplete feeder group may still reach the knockout."""
        group = knockout_competition.get_stage('K').get_group('CUP')

        assert group.team_may_have_matches('TM1')
        assert group.team_may_have_matches('TM3')
        assert not group.team_may_have_matches('TM4')
        assert not group.team_may_have_matches('TM9')

    def test_no_route_from_complete_feeder(self, league_competition):
        """A finished feeder only sends the teams in the referenced positions."""
        group = league_competition.get_stage('KO').get_group('F')

        assert not group.is_complete()
        assert not group.team_may_have_matches('TM2')
        assert not group.team_may_have_matches('TM4')

    def test_complete_group_has_no_maybe(self, league_competition):
        """Once complete a group only reports definite matches."""
        group = league_competition.get_stage('L').get_group('RR')
        assert not group.team_may_have_matches('TM1')
        assert group.team_has_matches('TM1')


class TestGroupState:
    """Tests for group completion and configuration."""

    def test_is_complete(self, league_competition, knockout_competition):
        """A group is complete when all its matches are."""
        assert league_competition.get_stage('L').get_group('RR').is_complete()
        assert not league_competition.get_stage('KO').get_group('F').is_complete()
        assert not knockout_competition.get_stage('P').get_group('A').is_complete()

    def test_all_teams_known(self, league_competition, knockout_competition):
        """Teams are known once every referenced group is complete."""
        assert league_competition.get_stage('KO').get_group('F').all_teams_known()
        assert not knockout_competition.get_stage('K').get_group('CUP').all_teams_known()
        assert knockout_competition.get_stage('P').get_group('A').all_teams_known()

    def test_group_types(self, league_competition, knockout_competition):
        """Groups are created with the type and scoring from the document."""
        final = league_competition.get_stage('KO').get_group('F')
        cup = knockout_competition.get_stage('K').get_group('CUP')

        assert isinstance(final, Crossover)
        assert final.group_type is GroupType.CROSSOVER
        assert isinstance(cup, Knockout)
        assert cup.match_type is MatchType.SETS
        assert cup.knockout_config.standing[0].position == '1st'

    def test_group_is_abstract(self, league_competition):
        """Only the concrete group types can be created."""
        with pytest.raises(TypeError):
            Group(league_competition.get_stage('L'), 'G', MatchType.SETS)

    def test_default_set_config(self, league_competition, knockout_competition):
        """Groups without set rules use the standard rules."""
        assert league_competition.get_stage('L').get_group('RR').set_config.max_sets == 5
        assert knockout_competition.get_stage('K').get_group('CUP').set_config.max_sets == 3

    def test_get_match(self, league_competition):
        """Matches are found by ID."""
        group = league_competition.get_stage('L').get_group('RR')
        assert group.get_match('M2').home_team.id == 'TM3'
        assert group.has_match('M4')
        assert not group.has_match('M9')

    def test_get_missing_match(self, league_competition):
        """Looking up a missing match is a lookup error."""
        group = league_competition.get_stage('L').get_group('RR')
        with pytest.raises(LookupError):
            group.get_match('M9')


class TestGroupMatches:
    """Tests for Group match and date queries."""

    def test_all_entries(self, league_competition):
        """Without a team every entry is returned, breaks included."""
        group = league_competition.get_stage('L').get_group('RR')
        assert entry_ids(group.get_matches()) == ['M1', 'M2', 'break', 'M3', 'M4']

    def test_playing_filter(self, league_competition):
        """Only matches the team plays in."""
        group = league_competition.get_stage('L').get_group('RR')
        assert entry_ids(group.get_matches('TM2', MatchFilter.PLAYING)) == ['M1', 'M4']

    def test_officiating_filter(self, league_competition):
        """Only matches the team officiates."""
        group = league_competition.get_stage('L').get_group('RR')
        assert entry_ids(group.get_matches('TM4', MatchFilter.OFFICIATING)) == ['M1']
        assert entry_ids(group.get_matches('TM4', MatchFilter.PLAYING | MatchFilter.OFFICIATING)) == ['M1', 'M2', 'M4']

    def test_all_in_group_ignores_team(self, league_competition):
        """ALL_IN_GROUP returns every entry for a team."""
        group = league_competition.get_stage('L').get_group('RR')
        assert len(group.get_matches('TM2', MatchFilter.ALL_IN_GROUP)) == 5

    def test_match_dates(self, league_competition):
        """Dates are listed once each in schedule order."""
        group = league_competition.get_stage('L').get_group('RR')

        assert group.get_match_dates() == ['2024-03-02', '2024-03-09']
        assert group.get_match_dates('TM1') == ['2024-03-02']
        assert group.get_match_dates('TM4', MatchFilter.PLAYING) == ['2024-03-02', '2024-03-09']

    def test_matches_on_date(self, league_competition):
        """A team's matches on a date come with the breaks on that date."""
        group = league_competition.get_stage('L').get_group('RR')

        assert entry_ids(group.get_matches_on_date('2024-03-02')) == ['M1', 'M2', 'break', 'M3']
        assert entry_ids(group.get_matches_on_date('2024-03-02', 'TM2', MatchFilter.PLAYING)) == ['M1', 'break']
        assert group.get_matches_on_date('2024-04-01') == []


class TestGroupValidation:
    """Tests for structural checks when loading groups."""

    def test_duplicate_match_ids(self, league_data):
        """Match IDs must be unique within a group."""
        league_data['stages'][0]['groups'][0]['matches'][1]['id'] = 'M1'
        with pytest.raises(StructuralError) as exc_info:
            Competition.load_from_data(league_data)
        assert str(exc_info.value) == 'Group {L:RR}: matches with duplicate IDs {M1} not allowed'

    def test_officials_cannot_play(self, league_data):
        """The officiating team cannot be one of the playing teams."""
        league_data['stages'][0]['groups'][0]['matches'][0]['officials'] = {'team': 'TM1'}
        with pytest.raises(StructuralError) as exc_info:
            Competition.load_from_data(league_data)
        assert str(exc_info.value) == (
            'Refereeing team (in match {L:RR:M1}) cannot be the same as one of the playing teams'
        )

    def test_officials_team_must_exist(self, league_data):
        """The officiating team must be a real team or reference."""
        league_data['stages'][0]['groups'][0]['matches'][0]['officials'] = {'team': 'TM9'}
        with pytest.raises(StructuralError, match='Invalid team ID for officials in match with ID "M1"'):
            Competition.load_from_data(league_data)

    def test_continuous_match_needs_complete(self, continuous_data):
        """Continuous matches must say whether they are complete."""
        del continuous_data['stages'][0]['groups'][0]['matches'][2]['complete']
        with pytest.raises(StructuralError, match='missing field "complete"'):
            Competition.load_from_data(continuous_data)

    def test_league_needs_config(self, league_data):
        """A league group must have a league configuration."""
        del league_data['stages'][0]['groups'][0]['league']
        with pytest.raises(DocumentError) as exc_info:
            Competition.load_from_data(league_data)
        assert 'a league group must have a "league" configuration' in str(exc_info.value)

    def test_invalid_date(self, league_data):
        """Dates must exist in the calendar."""
        league_data['stages'][0]['groups'][0]['matches'][0]['date'] = '2023-02-30'
        with pytest.raises(StructuralError, match='Invalid date "2023-02-30": date does not exist'):
            Competition.load_from_data(league_data)


class TestStage:
    """Tests for Stage."""

    def test_get_group(self, league_competition):
        """Groups are found by ID."""
        stage = league_competition.get_stage('L')
        assert stage.get_group('RR').name == 'Round robin'
        assert stage.has_group('RR')
        assert not stage.has_group('XX')

    def test_missing_group(self, league_competition):
        """Looking up a missing group raises EntityNotFoundError."""
        with pytest.raises(EntityNotFoundError):
            league_competition.get_stage('L').get_group('XX')

    def test_duplicate_group_ids(self, league_data):
        """Group IDs must be unique within a stage."""
        stage = league_data['stages'][1]
        stage['groups'].append(dict(stage['groups'][0], matches=stage['groups'][0]['matches']))
        with pytest.raises(StructuralError, match='Groups in a Stage with duplicate IDs not allowed'):
            Competition.load_from_data(league_data)

    def test_team_in_two_groups(self, league_data, make_match):
        """A team cannot play in two groups of the same stage."""
        league_data['stages'][1]['groups'].append({
            'id': 'G',
            'type': 'crossover',
            'matchType': 'sets',
            'matches': [make_match('X1', '{L:RR:league:1}', 'TM4', date='2024-03-16')],
        })
        with pytest.raises(StructuralError) as exc_info:
            Competition.load_from_data(league_data)
        assert str(exc_info.value) == (
            'Groups in the same stage cannot contain the same team. '
            'Groups {KO:F} and {KO:G} both contain the following team IDs: "{L:RR:league:1}"'
        )

    def test_team_ids(self, league_competition):
        """Stage team IDs combine the groups' team IDs."""
        assert league_competition.get_stage('L').get_team_ids() == ['TM1', 'TM2', 'TM3', 'TM4']
        assert league_competition.get_stage('KO').get_team_ids(TeamFilter.KNOWN) == ['TM1', 'TM2', 'TM3']

    def test_matches_sorted_by_schedule(self, knockout_competition):
        """Matches across the stage are ordered by date and start."""
        stage = knockout_competition.get_stage('P')
        assert entry_ids(stage.get_matches()) == ['PA1', 'PA2', 'PA3']
        assert entry_ids(stage.get_matches('TM1', MatchFilter.PLAYING)) == ['PA1', 'PA3']

    def test_team_queries(self, knockout_competition):
        """Stage answers team questions across its groups."""
        pool = knockout_competition.get_stage('P')
        knockout = knockout_competition.get_stage('K')

        assert pool.team_has_matches('TM2')
        assert not pool.team_has_officiating('TM2')
        assert not knockout.team_has_matches('TM2')
        assert knockout.team_may_have_matches('TM2')
        assert not knockout.team_may_have_matches('TM4')
        assert not knockout.is_complete()

    def test_match_dates(self, league_competition):
        """Stage dates are sorted and unique."""
        assert league_competition.get_stage('L').get_match_dates() == ['2024-03-02', '2024-03-09']
        assert league_competition.get_stage('KO').get_match_dates('TM3') == ['2024-03-16']

    def test_matches_on_date(self, league_competition):
        """Stage entries on a date are in schedule order."""
        entries = league_competition.get_stage('L').get_matches_on_date('2024-03-02')
        assert entry_ids(entries) == ['M1', 'M2', 'break', 'M3']


class TestIfUnknown:
    """Tests for the placeholder schedule of a stage."""

    @pytest.fixture
    def if_unknown_data(self, knockout_data, make_match):
        knockout_data['stages'][1]['ifUnknown'] = {
            'description': ['The finals are played by the top two in pool A'],
            'matches': [
                make_match('IU1', '1st in pool A', '2nd in pool A', date='2024-06-08', complete=False),
                {'type': 'break', 'date': '2024-06-08', 'name': 'Presentation'},
            ],
        }
        return knockout_data

    def test_load(self, if_unknown_data):
        """Placeholder matches are loaded without resolving their teams."""
        competition = Competition.load_from_data(if_unknown_data)
        if_unknown = competition.get_stage('K').if_unknown

        assert if_unknown.description == ['The finals are played by the top two in pool A']
        assert [match.id for match in if_unknown.matches] == ['IU1']
        assert not if_unknown.get_match('IU1').is_complete()
        assert if_unknown.has_match('IU1')

    def test_round_trip(self, if_unknown_data):
        """The placeholder schedule is written back out."""
        competition = Competition.load_from_data(if_unknown_data)
        assert competition.to_dict() == if_unknown_data

    def test_duplicate_ids(self, if_unknown_data, make_match):
        """Placeholder match IDs must be unique."""
        if_unknown_data['stages'][1]['ifUnknown']['matches'].append(make_match('IU1', 'A', 'B'))
        with pytest.raises(StructuralError, match='matches with duplicate IDs'):
            Competition.load_from_data(if_unknown_data)
