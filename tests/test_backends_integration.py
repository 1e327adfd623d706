"""
Integration tests for the backend handlers against in-process fakes.

S3 runs against moto, Redis against fakeredis.
"""
import pytest
from moto import mock_aws
import boto3
import fakeredis
import os
from unittest.mock import patch

from handler import redis_handler, s3_handler, S3_OBJECT_BODY
from services.redis_service import RedisService
from services.s3_service import S3Service


@pytest.fixture
def aws_credentials():
    """Mocked AWS credentials for moto."""
    with patch.dict(os.environ, {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
    }):
        yield


@pytest.fixture
def fake_redis():
    """RedisService backed by an in-memory fakeredis server."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    with patch('services.redis_service.redis.Redis.from_url', return_value=client):
        yield RedisService("redis://localhost:6379/0"), client


@pytest.mark.integration
@mock_aws()
def test_s3_handler_creates_bucket_and_lists_object(aws_credentials):
    """Test a first call creates the bucket, writes and lists the object."""
    service = S3Service('demo-bucket', region_name='us-east-1')

    response = s3_handler(service)

    assert response.status_code == 200
    body = response.body.decode()
    assert 'Bucket: demo-bucket' in body
    assert 'KeyCount: 1' in body

    s3 = boto3.client('s3', region_name='us-east-1')
    listed = s3.list_objects_v2(Bucket='demo-bucket')
    key = listed['Contents'][0]['Key']
    assert key.endswith('.log')
    assert key in body
    stored = s3.get_object(Bucket='demo-bucket', Key=key)['Body'].read()
    assert stored == S3_OBJECT_BODY.encode()


@pytest.mark.integration
@mock_aws()
def test_s3_handler_repeat_call_with_owned_bucket(aws_credentials):
    """Test a second call succeeds although the bucket is already owned."""
    service = S3Service('demo-bucket', region_name='eu-west-1')

    first = s3_handler(service)
    second = s3_handler(service)

    assert first.status_code == 200
    assert second.status_code == 200

    s3 = boto3.client('s3', region_name='eu-west-1')
    keys = [obj['Key'] for obj in s3.list_objects_v2(Bucket='demo-bucket')['Contents']]
    assert keys
    for key in keys:
        assert key in second.body.decode()


@pytest.mark.integration
@mock_aws()
def test_s3_handler_bucket_owned_by_someone_else(aws_credentials):
    """Test create_bucket failures other than ownership abort with 500."""
    service = S3Service('demo-bucket', region_name='eu-west-1')
    with patch.object(
        service.s3_client, 'create_bucket',
        side_effect=service.s3_client.exceptions.BucketAlreadyExists(
            {'Error': {'Code': 'BucketAlreadyExists', 'Message': 'taken'}},
            'CreateBucket'
        )
    ):
        response = s3_handler(service)

    assert response.status_code == 500
    assert response.body.decode() == (
        'Failed to upload data to demo-bucket, BucketAlreadyExists: taken\n'
    )


@pytest.mark.integration
def test_redis_set_then_read_round_trip(fake_redis):
    """Test key and value parameters are stored and listed."""
    service, client = fake_redis

    response = redis_handler(service, key='a', value='b')

    assert response.status_code == 200
    assert client.get('a') == 'b'
    assert 'a b\n' in response.body.decode()
    assert client.get('foo') is None


@pytest.mark.integration
def test_redis_counter_increments_by_one_per_call(fake_redis):
    """Test bare calls bump the counter by exactly one each time."""
    service, client = fake_redis

    redis_handler(service)
    assert client.get('foo') == '1'

    response = redis_handler(service)
    assert client.get('foo') == '2'
    assert response.body.decode() == 'foo 2\n'


@pytest.mark.integration
def test_redis_partial_parameters_increment_counter(fake_redis):
    """Test a key without a value falls back to the counter."""
    service, client = fake_redis

    redis_handler(service, key='a', value='')

    assert client.get('a') is None
    assert client.get('foo') == '1'


@pytest.mark.integration
def test_redis_counter_existing_value(fake_redis):
    """Test the counter continues from a stored integer."""
    service, client = fake_redis
    client.set('foo', '41')

    redis_handler(service)

    assert client.get('foo') == '42'
