import unittest
from dataclasses import replace

from tests.helpers import FakeCryptoProvider, make_instant

from dkd import (
    Content,
    ContentDecryptionError,
    InstantMessage,
    KeyDecryptionError,
    MalformedMessageError,
    MissingKeyError,
    ReliableMessage,
    SecureMessage,
    SignatureVerificationError,
    Transform,
)
from dkd.codec.fields import b64decode, b64encode


class TestTransformSingle(unittest.TestCase):
    def setUp(self):
        self.crypto = FakeCryptoProvider()
        self.transform = Transform(self.crypto)
        self.instant = make_instant()

    def test_alice_to_bob_example(self):
        secure = self.transform.encrypt(self.instant, b"P")
        self.assertIsInstance(secure, SecureMessage)
        self.assertEqual(secure.sender, "alice")
        self.assertEqual(secure.receiver, "bob")
        self.assertEqual(secure.time, 1000)
        self.assertEqual(secure.key, b64encode(b"K:bob\x00P"))
        self.assertIsNone(secure.keys)
        self.assertIsNone(secure.group)
        self.assertFalse(hasattr(secure, "content"))

        instant = self.transform.decrypt(secure)
        self.assertEqual(instant.envelope, self.instant.envelope)
        self.assertEqual(instant.content, Content(type=1, serial_number=1, extra={"text": "hi"}))
        self.assertEqual(instant.content.to_dict(), {"type": 1, "sn": 1, "text": "hi"})

    def test_data_is_base64_of_encrypted_content(self):
        secure = self.transform.encrypt(self.instant, b"P")
        raw = b64decode(secure.data)
        self.assertEqual(raw, self.crypto.encrypt_content(self.instant, self.instant.content, b"P"))

    def test_roundtrip_preserves_extra_content_fields(self):
        content = Content(type=0x88, serial_number=42, extra={"command": "handshake", "nested": {"a": [1, 2]}})
        instant = InstantMessage.create("alice", "bob", 1, content, note="x")
        out = self.transform.decrypt(self.transform.encrypt(instant, b"pw"))
        self.assertEqual(out.content, content)
        self.assertEqual(out.extra, {"note": "x"})

    def test_content_group_is_carried(self):
        instant = make_instant(receiver="bob", group="team")
        secure = self.transform.encrypt(instant, b"pw")
        self.assertEqual(secure.group, "team")
        self.transform.decrypt(secure)
        self.assertEqual(self.crypto.decrypt_key_calls[-1], ("alice", "bob", "team"))

    def test_missing_key(self):
        secure = SecureMessage(envelope=self.instant.envelope, data=b64encode(b"x"))
        with self.assertRaises(MissingKeyError):
            self.transform.decrypt(secure)

    def test_missing_member_key(self):
        secure = self.transform.encrypt(self.instant, b"pw", ["bob"])
        with self.assertRaises(MissingKeyError):
            self.transform.decrypt(secure, "carol")
        with self.assertRaises(MissingKeyError):
            self.transform.decrypt(secure)

    def test_key_decryption_error_propagates(self):
        secure = self.transform.encrypt(self.instant, b"pw")
        bad = replace(secure, key=b64encode(b"K:mallory\x00pw"))
        with self.assertRaises(KeyDecryptionError):
            self.transform.decrypt(bad)

    def test_content_decryption_error_propagates(self):
        secure = self.transform.encrypt(self.instant, b"pw")
        bad = replace(secure, key=b64encode(b"K:bob\x00other"))
        with self.assertRaises(ContentDecryptionError):
            self.transform.decrypt(bad)

    def test_invalid_base64_key(self):
        secure = self.transform.encrypt(self.instant, b"pw")
        with self.assertRaises(MalformedMessageError):
            self.transform.decrypt(replace(secure, key="***"))

    def test_encrypt_rejects_non_instant(self):
        secure = self.transform.encrypt(self.instant, b"pw")
        with self.assertRaises(MalformedMessageError):
            self.transform.encrypt(secure, b"pw")


class TestTransformSignature(unittest.TestCase):
    def setUp(self):
        self.transform = Transform(FakeCryptoProvider())
        self.secure = self.transform.encrypt(make_instant(), b"pw")

    def test_sign_verify_roundtrip(self):
        reliable = self.transform.sign(self.secure)
        self.assertIsInstance(reliable, ReliableMessage)
        self.assertIsNone(reliable.meta)
        self.assertEqual(reliable.data, self.secure.data)
        self.assertEqual(reliable.key, self.secure.key)
        back = self.transform.verify(reliable)
        self.assertIs(type(back), SecureMessage)
        self.assertEqual(back, self.secure)

    def test_sign_does_not_mutate_input(self):
        before = replace(self.secure)
        self.transform.sign(self.secure)
        self.assertEqual(self.secure, before)
        self.assertNotIsInstance(self.secure, ReliableMessage)

    def test_resign_keeps_meta(self):
        reliable = replace(self.transform.sign(self.secure), meta={"k": 1})
        resigned = self.transform.sign(reliable)
        self.assertEqual(resigned.meta, {"k": 1})
        self.assertEqual(resigned.extra, reliable.extra)

    def test_tampered_data_fails(self):
        reliable = self.transform.sign(self.secure)
        tampered = replace(reliable, data=b64encode(b"other ciphertext"))
        with self.assertRaises(SignatureVerificationError):
            self.transform.verify(tampered)

    def test_tampered_signature_fails(self):
        reliable = self.transform.sign(self.secure)
        tampered = replace(reliable, signature=b64encode(b"\x00" * 32))
        with self.assertRaises(SignatureVerificationError):
            self.transform.verify(tampered)

    def test_sign_requires_secure(self):
        with self.assertRaises(MalformedMessageError):
            self.transform.sign(make_instant())

    def test_verify_requires_reliable(self):
        with self.assertRaises(MalformedMessageError):
            self.transform.verify(self.secure)


class TestTransformGroup(unittest.TestCase):
    def setUp(self):
        self.crypto = FakeCryptoProvider()
        self.transform = Transform(self.crypto)
        self.members = ["m1", "m2", "m3"]
        self.instant = make_instant(receiver="team")
        self.secure = self.transform.encrypt(self.instant, b"pw", self.members)

    def test_group_encrypt_targets_each_member(self):
        self.assertIsNone(self.secure.key)
        self.assertEqual(sorted(self.secure.keys), sorted(self.members))
        self.assertEqual(self.crypto.encrypt_key_calls, self.members)
        for member in self.members:
            self.assertEqual(b64decode(self.secure.keys[member]), b"K:" + member.encode() + b"\x00pw")

    def test_empty_members_rejected(self):
        with self.assertRaises(MalformedMessageError):
            self.transform.encrypt(self.instant, b"pw", [])

    def test_decrypt_with_member(self):
        out = self.transform.decrypt(self.secure, "m2")
        self.assertEqual(out.content, self.instant.content)
        self.assertEqual(self.crypto.decrypt_key_calls[-1], ("alice", "m2", "team"))

    def test_split_fan_out(self):
        parts = self.transform.split(self.secure, self.members)
        self.assertEqual(len(parts), 3)
        for member, part in zip(self.members, parts):
            self.assertTrue(part.key)
            self.assertIsNone(part.keys)
            self.assertEqual(part.key, self.secure.keys[member])
            self.assertEqual(part.group, "team")
            self.assertEqual(part.envelope, self.secure.envelope)
            self.assertEqual(self.transform.decrypt(part, member).content, self.instant.content)

    def test_split_order_follows_members(self):
        order = ["m3", "m1", "m2"]
        parts = self.transform.split(self.secure, order)
        self.assertEqual([p.key for p in parts], [self.secure.keys[m] for m in order])

    def test_split_unknown_member_has_no_key(self):
        parts = self.transform.split(self.secure, ["m1", "stranger"])
        self.assertTrue(parts[0].key)
        self.assertIsNone(parts[1].key)
        with self.assertRaises(MissingKeyError):
            self.transform.decrypt(parts[1], "stranger")

    def test_split_does_not_mutate_input(self):
        keys_before = dict(self.secure.keys)
        self.transform.split(self.secure, self.members)
        self.assertEqual(self.secure.keys, keys_before)

    def test_split_requires_keys(self):
        single = self.transform.encrypt(self.instant, b"pw")
        with self.assertRaises(MalformedMessageError):
            self.transform.split(single, self.members)

    def test_split_signed_group_message(self):
        reliable = self.transform.sign(self.secure)
        parts = self.transform.split(reliable, self.members)
        for member, part in zip(self.members, parts):
            self.assertIsInstance(part, ReliableMessage)
            secure = self.transform.verify(part)
            self.assertEqual(self.transform.decrypt(secure, member).content, self.instant.content)

    def test_trim(self):
        trimmed = self.transform.trim(self.secure, "m1")
        self.assertEqual(trimmed.key, self.secure.keys["m1"])
        self.assertIsNone(trimmed.keys)
        self.assertEqual(trimmed.group, "team")
        self.assertIsNotNone(self.secure.keys)

    def test_trim_idempotent(self):
        once = self.transform.trim(self.secure, "m2")
        twice = self.transform.trim(once, "m2")
        self.assertEqual(once, twice)

    def test_trim_unknown_member(self):
        trimmed = self.transform.trim(self.secure, "stranger")
        self.assertIsNone(trimmed.key)
        self.assertIsNone(trimmed.keys)

    def test_key_and_keys_never_both_set(self):
        produced = [self.secure, self.transform.encrypt(self.instant, b"pw")]
        produced += self.transform.split(self.secure, self.members)
        produced += [self.transform.trim(self.secure, m) for m in self.members]
        for msg in produced:
            self.assertFalse(msg.key is not None and msg.keys is not None)


if __name__ == "__main__":
    unittest.main()
