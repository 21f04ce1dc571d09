from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from examprep.extensions import db
from examprep.models import Attempt

from conftest import login, question_ids


def start(client, test_id):
    response = client.post(f'/tests/{test_id}/start')
    assert response.status_code in (200, 201)
    return response.get_json()


def submit(client, test_id, attempt_id, answers):
    return client.post(f'/tests/{test_id}/submit', json={
        'attemptId': attempt_id,
        'answers': answers,
    })


def answer(question_id, selected, time_spent=10, **extra):
    payload = {
        'questionId': question_id,
        'selectedAnswers': selected,
        'isMarkedForReview': False,
        'timeSpent': time_spent,
    }
    payload.update(extra)
    return payload


class TestAuth:

    def test_endpoints_require_session(self, client, three_question_test):
        test_id = three_question_test.id
        assert client.post(f'/tests/{test_id}/start').status_code == 401
        assert client.post(f'/tests/{test_id}/save', json={}).status_code == 401
        assert client.post(f'/tests/{test_id}/submit', json={}).status_code == 401
        assert client.get('/attempts/1/result').status_code == 401

        response = client.get('/analytics/performance')
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}

    def test_health_is_public(self, client):
        assert client.get('/health').get_json() == {'status': 'ok'}


class TestStart:

    def test_creates_then_resumes(self, student_client, three_question_test):
        test_id = three_question_test.id
        first = student_client.post(f'/tests/{test_id}/start')
        assert first.status_code == 201
        data = first.get_json()
        assert data['created']
        assert len(data['questions']) == 3
        assert data['autosaveInterval'] == 10
        assert 'correct_answers' not in data['questions'][0]

        q1 = question_ids(three_question_test)[0]
        student_client.post(f'/tests/{test_id}/save', json={
            'attemptId': data['attemptId'],
            'answers': [answer(q1, ['A'])],
            'timeSpent': 12,
        })

        resumed = student_client.post(f'/tests/{test_id}/start')
        assert resumed.status_code == 200
        resumed = resumed.get_json()
        assert resumed['attemptId'] == data['attemptId']
        assert not resumed['created']
        assert resumed['timeSpent'] == 12
        assert resumed['answers'] == [{
            'questionId': q1, 'selectedAnswers': ['A'], 'isMarkedForReview': False,
            'timeSpent': 10, 'version': 1,
        }]

    def test_submitted_attempt_points_to_result(self, student_client, three_question_test):
        test_id = three_question_test.id
        attempt_id = start(student_client, test_id)['attemptId']
        submit(student_client, test_id, attempt_id, [])

        data = student_client.post(f'/tests/{test_id}/start').get_json()
        assert data['isSubmitted']
        assert data['redirect'] == f'/attempts/{attempt_id}/result'

    def test_unknown_test(self, student_client):
        response = student_client.post('/tests/404/start')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Test not found'}


class TestSave:

    def test_save_requires_owned_attempt(self, client, three_question_test):
        test_id = three_question_test.id
        login(client, 'owner')
        attempt_id = start(client, test_id)['attemptId']

        login(client, 'intruder')
        response = client.post(f'/tests/{test_id}/save', json={
            'attemptId': attempt_id, 'answers': [], 'timeSpent': 5,
        })
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Attempt not found'}

    def test_save_reports_versions_and_stale(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1 = question_ids(three_question_test)[0]
        attempt_id = start(student_client, test_id)['attemptId']

        body = {'attemptId': attempt_id, 'answers': [answer(q1, ['A'])], 'timeSpent': 10}
        data = student_client.post(f'/tests/{test_id}/save', json=body).get_json()
        assert data == {'success': True, 'staleQuestionIds': [], 'versions': {str(q1): 1}}

        student_client.post(f'/tests/{test_id}/save', json={
            'attemptId': attempt_id, 'answers': [answer(q1, ['B'], version=1)], 'timeSpent': 10,
        })
        stale = student_client.post(f'/tests/{test_id}/save', json={
            'attemptId': attempt_id, 'answers': [answer(q1, ['C'], version=1)], 'timeSpent': 10,
        }).get_json()
        assert stale['staleQuestionIds'] == [q1]

        attempt = db.session.get(Attempt, attempt_id)
        assert attempt.time_spent_seconds == 30

    def test_save_after_submit_conflicts(self, student_client, three_question_test):
        test_id = three_question_test.id
        attempt_id = start(student_client, test_id)['attemptId']
        submit(student_client, test_id, attempt_id, [])

        response = student_client.post(f'/tests/{test_id}/save', json={
            'attemptId': attempt_id, 'answers': [], 'timeSpent': 10,
        })
        assert response.status_code == 409

    def test_bad_body(self, student_client, three_question_test):
        response = student_client.post(
            f'/tests/{three_question_test.id}/save', data='nope', content_type='text/plain'
        )
        assert response.status_code == 400

    def test_database_failure_returns_500(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1 = question_ids(three_question_test)[0]
        attempt_id = start(student_client, test_id)['attemptId']

        error = OperationalError('UPDATE answer', {}, Exception('disk full'))
        with patch('sqlalchemy.orm.Session.commit', side_effect=error):
            response = student_client.post(f'/tests/{test_id}/save', json={
                'attemptId': attempt_id, 'answers': [answer(q1, ['A'])], 'timeSpent': 10,
            })

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to save answer'}


class TestSubmit:

    def test_example_scoring(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1, q2, _ = question_ids(three_question_test)
        attempt_id = start(student_client, test_id)['attemptId']

        response = submit(student_client, test_id, attempt_id, [
            answer(q1, ['A']), answer(q2, ['C'])
        ])

        assert response.status_code == 200
        assert response.get_json() == {
            'success': True, 'totalMarks': 12, 'obtainedMarks': 3, 'percentage': 25,
        }

    def test_all_wrong_is_zero(self, student_client, three_question_test):
        test_id = three_question_test.id
        attempt_id = start(student_client, test_id)['attemptId']

        data = submit(student_client, test_id, attempt_id, [
            answer(qid, ['D']) for qid in question_ids(three_question_test)
        ]).get_json()

        assert data['obtainedMarks'] == 0
        assert data['percentage'] == 0

    def test_resubmit_keeps_marks(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1, q2, q3 = question_ids(three_question_test)
        attempt_id = start(student_client, test_id)['attemptId']

        first = submit(student_client, test_id, attempt_id, [answer(q1, ['A'])]).get_json()
        second = submit(student_client, test_id, attempt_id, [
            answer(q1, ['A']), answer(q2, ['B']), answer(q3, ['C'])
        ]).get_json()

        assert first['obtainedMarks'] == second['obtainedMarks'] == 4

    def test_wrong_test_in_url(self, student_client, three_question_test, make_test):
        other = make_test([('Physics', 'mcq_single', ['A'], 4, 1)], title='Other')
        attempt_id = start(student_client, three_question_test.id)['attemptId']

        response = submit(student_client, other.id, attempt_id, [])
        assert response.status_code == 404

    def test_unknown_question_is_404(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1 = question_ids(three_question_test)[0]
        attempt_id = start(student_client, test_id)['attemptId']

        response = submit(student_client, test_id, attempt_id, [
            answer(q1, ['A']), answer(999999, ['A'])
        ])

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Question 999999 not found'}
        assert not db.session.get(Attempt, attempt_id).is_submitted


class TestResult:

    def test_result_breakdown(self, student_client, three_question_test):
        test_id = three_question_test.id
        q1, q2, q3 = question_ids(three_question_test)
        attempt_id = start(student_client, test_id)['attemptId']
        submit(student_client, test_id, attempt_id, [
            answer(q1, ['A'], time_spent=40), answer(q2, ['C'], time_spent=20)
        ])

        response = student_client.get(f'/attempts/{attempt_id}/result')
        assert response.status_code == 200
        data = response.get_json()

        assert data['attempt']['obtained_marks'] == 3
        assert data['attempt']['percentage'] == 25
        assert data['test']['title'] == 'Mock Test'
        assert data['test']['total_marks'] == 12
        assert data['percentile'] == 50
        assert data['averageScore'] == 3

        sections = {s['section']: s for s in data['sectionWiseResults']}
        assert sections['Physics']['correct'] == 1
        assert sections['Physics']['marks'] == 4
        assert sections['Physics']['timeSpent'] == 40
        assert sections['Chemistry']['incorrect'] == 1
        assert sections['Chemistry']['marks'] == -1
        assert sections['Mathematics']['attempted'] == 0

        questions = {q['questionId']: q for q in data['questionWiseResults']}
        assert set(questions) == {q1, q2, q3}
        assert questions[q2]['selectedAnswers'] == ['C']
        assert questions[q2]['correctAnswers'] == ['B']
        assert questions[q3]['marksAwarded'] == 0

    def test_percentile_against_peers(self, client, three_question_test):
        test_id = three_question_test.id
        q1, q2, q3 = question_ids(three_question_test)
        scripts = {
            'low': [answer(q1, ['D'])],
            'mid': [answer(q1, ['A'])],
            'high': [answer(q1, ['A']), answer(q2, ['B']), answer(q3, ['C'])],
        }
        attempts = {}
        for student, answers in scripts.items():
            login(client, student)
            attempts[student] = start(client, test_id)['attemptId']
            submit(client, test_id, attempts[student], answers)

        login(client, 'high')
        data = client.get(f'/attempts/{attempts["high"]}/result').get_json()
        # 2 of 3 submitted attempts scored lower
        assert data['percentile'] == 67
        # (0 + 4 + 12) / 3
        assert data['averageScore'] == 5

        login(client, 'low')
        assert client.get(f'/attempts/{attempts["low"]}/result').get_json()['percentile'] == 0

    def test_result_of_someone_else(self, client, three_question_test):
        login(client, 'owner')
        attempt_id = start(client, three_question_test.id)['attemptId']

        login(client, 'intruder')
        assert client.get(f'/attempts/{attempt_id}/result').status_code == 404
